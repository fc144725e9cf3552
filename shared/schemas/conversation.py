"""
HSC Beacon Sync - Conversation Schemas

HelpScout conversation payloads as returned by the Mailbox API v1,
plus the Beacon field set extracted from a conversation's notes.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


def _coerce_id(value: Any) -> Any:
    """HelpScout ids arrive as ints; keep them as opaque strings"""
    if value is None or isinstance(value, str):
        return value
    return str(value)


class ThreadSource(BaseModel):
    """Where a thread came from (web, email, embed-form, ...)"""
    type: Optional[str] = None
    via: Optional[str] = None


class Thread(BaseModel):
    """Single message or note within a conversation"""
    id: Optional[str] = None
    type: Optional[str] = None
    source: Optional[ThreadSource] = None
    body: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Any:
        return _coerce_id(value)

    @property
    def source_type(self) -> Optional[str]:
        return self.source.type if self.source else None


class ConversationSummary(BaseModel):
    """Conversation as listed by the search endpoint"""
    id: str
    number: Optional[int] = None
    subject: Optional[str] = None
    status: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Any:
        return _coerce_id(value)


class Conversation(BaseModel):
    """
    Full conversation loaded by id.
    `threads` is absent when the API omits it.
    """
    id: str
    number: Optional[int] = None
    subject: Optional[str] = None
    threads: Optional[list[Thread]] = None

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Any:
        return _coerce_id(value)


class BeaconFieldSet(BaseModel):
    """
    Profile data parsed from a Beacon note.
    Field order follows the order of the rows in the note's table.
    """
    conversation_id: str
    fields: dict[str, str] = Field(default_factory=dict)

    class Config:
        json_schema_extra = {
            "example": {
                "conversation_id": "123456",
                "fields": {
                    "roles": "authenticated user, developer",
                    "site_name": "University of Colorado Boulder",
                    "site_url": "",
                },
            }
        }
