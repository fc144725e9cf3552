"""
HelpScout API Client
Authenticated JSON requests against the HelpScout Mailbox API
"""

import json
from typing import Any, Optional

import httpx
import structlog

from shared.config import SyncSettings
from shared.errors import HelpScoutDecodeError, HelpScoutRequestError

logger = structlog.get_logger()


class HelpScoutClient:
    """
    Client for the HelpScout Mailbox API

    Every response is a JSON envelope holding either a list under
    `items` (search, listings) or a single object under `item`.
    `request()` unwraps that envelope.
    """

    def __init__(
        self,
        settings: SyncSettings,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_url = settings.api_url.rstrip("/")
        self._client = httpx.Client(
            auth=httpx.BasicAuth(settings.user, settings.password),
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> "HelpScoutClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def request(self, path: str, method: str = "GET", body: Optional[str] = None) -> Any:
        """
        Send a request and unwrap the response envelope.

        Args:
            path: Endpoint relative to the API URL, appended verbatim
            method: HTTP verb
            body: Pre-serialized JSON body for PUT/POST

        Returns:
            The `items` list or the `item` object; None for an empty response

        Raises:
            HelpScoutRequestError: On network failure or an error status
            HelpScoutDecodeError: On malformed JSON or an unknown envelope
        """
        url = f"{self.api_url}/{path}"

        try:
            response = self._client.request(method, url, content=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise HelpScoutRequestError(
                f"{method} {path} returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise HelpScoutRequestError(f"{method} {path} failed: {e}") from e

        # Updates answer with an empty body
        if not response.content.strip():
            return None

        try:
            results = response.json()
        except json.JSONDecodeError as e:
            raise HelpScoutDecodeError(f"{method} {path} returned invalid JSON") from e

        if not isinstance(results, dict):
            raise HelpScoutDecodeError(f"{method} {path} returned a non-object response")

        # The result can have a plural or singular form
        if "items" in results:
            return results["items"]
        if "item" in results:
            return results["item"]

        raise HelpScoutDecodeError(
            f"{method} {path} response has neither 'items' nor 'item'"
        )

    def check_health(self) -> bool:
        """Check that the API accepts our credentials"""
        try:
            self.request("mailboxes.json")
            return True
        except Exception as e:
            logger.warning("HelpScout health check failed", error=str(e))
            return False

    def close(self):
        """Close the underlying HTTP client"""
        self._client.close()
