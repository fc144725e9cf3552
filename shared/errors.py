"""
HSC Beacon Sync exceptions
"""

from typing import Optional


class HelpScoutError(Exception):
    """Base exception for HelpScout sync failures"""


class HelpScoutRequestError(HelpScoutError):
    """Request could not be completed or returned an error status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class HelpScoutDecodeError(HelpScoutError):
    """Response body is not JSON or carries neither `items` nor `item`"""


class SyncConfigError(HelpScoutError):
    """Invalid or missing sync configuration"""


class LedgerUnavailableError(HelpScoutError):
    """Ledger database cannot be reached"""
