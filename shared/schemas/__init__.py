"""HSC Beacon Sync Shared Schemas"""

from .conversation import (
    BeaconFieldSet,
    Conversation,
    ConversationSummary,
    Thread,
    ThreadSource,
)
from .sync import LedgerEntry, SyncReport, UpdateResult, UpdateStatus

__all__ = [
    # Conversation schemas
    "Conversation",
    "ConversationSummary",
    "Thread",
    "ThreadSource",
    "BeaconFieldSet",
    # Sync schemas
    "LedgerEntry",
    "UpdateStatus",
    "UpdateResult",
    "SyncReport",
]
