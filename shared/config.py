"""
HSC Beacon Sync configuration
All environment parsing happens here; services receive a SyncSettings object.
"""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from shared.errors import SyncConfigError

DEFAULT_API_URL = "https://api.helpscout.net/v1"
DEFAULT_LEDGER_COLLECTION = "hsc_updated_conversations"


class SyncSettings(BaseModel):
    """Connection and mapping settings for one sync run"""

    # HelpScout API
    api_url: str = DEFAULT_API_URL
    user: str
    # HelpScout v1 takes the API key as user and ignores the password
    password: str = "X"

    # Beacon field name -> HelpScout custom field id
    field_mappings: dict[str, int] = Field(default_factory=dict)

    # Ledger (ArangoDB)
    arango_host: str = "localhost"
    arango_port: int = 8529
    arango_db: str = "hsc"
    arango_user: str = "root"
    arango_password: str = ""
    ledger_collection: str = DEFAULT_LEDGER_COLLECTION

    @property
    def auth(self) -> dict[str, str]:
        return {"user": self.user, "password": self.password}

    @classmethod
    def from_env(cls, mappings: Optional[str] = None) -> "SyncSettings":
        """
        Build settings from HSC_* and ARANGODB_* environment variables.

        Args:
            mappings: JSON object or path to a JSON file; overrides HSC_FIELD_MAPPINGS

        Raises:
            SyncConfigError: If credentials are missing or values are invalid
        """
        user = os.getenv("HSC_API_USER")
        if not user:
            raise SyncConfigError("HSC_API_USER is not set")

        raw_mappings = mappings if mappings is not None else os.getenv("HSC_FIELD_MAPPINGS", "")

        try:
            return cls(
                api_url=os.getenv("HSC_API_URL", DEFAULT_API_URL),
                user=user,
                password=os.getenv("HSC_API_PASSWORD", "X"),
                field_mappings=load_field_mappings(raw_mappings),
                arango_host=os.getenv("ARANGODB_HOST", "localhost"),
                arango_port=int(os.getenv("ARANGODB_PORT", "8529")),
                arango_db=os.getenv("ARANGODB_DB", "hsc"),
                arango_user=os.getenv("ARANGODB_USER", "root"),
                arango_password=os.getenv("ARANGODB_PASSWORD", ""),
                ledger_collection=os.getenv("HSC_LEDGER_COLLECTION", DEFAULT_LEDGER_COLLECTION),
            )
        except (ValueError, ValidationError) as e:
            raise SyncConfigError(f"Invalid sync configuration: {e}") from e


def load_field_mappings(raw: str) -> dict[str, int]:
    """
    Parse a field mapping given inline as JSON or as a path to a JSON file.
    Empty input means no mapping.
    """
    raw = (raw or "").strip()
    if not raw:
        return {}

    if not raw.startswith("{"):
        path = Path(raw).expanduser()
        if not path.is_file():
            raise SyncConfigError(f"Field mapping file not found: {path}")
        raw = path.read_text()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SyncConfigError(f"Field mapping is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise SyncConfigError("Field mapping must be a JSON object")

    try:
        return {str(name): int(field_id) for name, field_id in data.items()}
    except (TypeError, ValueError) as e:
        raise SyncConfigError(f"Field ids must be integers: {e}") from e
