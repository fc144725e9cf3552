"""
HSC Beacon Sync - Ledger and run result schemas
"""

import time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class LedgerEntry(BaseModel):
    """
    Record of a conversation already pushed to HelpScout.
    Keyed by conversation id; later writes overwrite earlier ones.
    """
    conversation_id: str
    payload_sent: str
    updated_on: int = Field(default_factory=lambda: int(time.time()))


class UpdateStatus(str, Enum):
    """Outcome of a custom-field update request"""
    SENT = "sent"
    FAILED = "failed"


class UpdateResult(BaseModel):
    """Per-conversation outcome returned by the dispatcher"""
    conversation_id: str
    status: UpdateStatus
    payload: str
    error: Optional[str] = None

    class Config:
        use_enum_values = True


class SyncReport(BaseModel):
    """Counts for one pipeline run"""
    fetched: int = 0
    extracted: int = 0
    skipped: int = 0
    sent: int = 0
    failed: int = 0
    results: list[UpdateResult] = Field(default_factory=list)
