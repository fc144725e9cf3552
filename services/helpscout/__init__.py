"""
HSC HelpScout Service
Talks to the HelpScout Mailbox API and keeps the processed-conversation ledger

Components:
- client.py: HelpScout API client (Basic auth, JSON envelope unwrapping)
- storage.py: Ledger stores (ArangoDB and in-memory)
"""

from .client import HelpScoutClient
from .storage import ArangoLedgerStore, InMemoryLedgerStore, LedgerStore

__all__ = ["HelpScoutClient", "LedgerStore", "ArangoLedgerStore", "InMemoryLedgerStore"]
