"""
Beacon Sync Pipeline
Copies Beacon profile data into HelpScout custom fields.
Meant to run on a schedule (cron); already-updated conversations are
remembered in the ledger and skipped on later runs.
"""

import json
import time
from typing import Iterable, Optional

import structlog
from pydantic import BaseModel, ValidationError

from services.beacon.parser import BeaconNoteParser
from services.helpscout.client import HelpScoutClient
from services.helpscout.storage import LedgerStore
from shared.errors import HelpScoutDecodeError, HelpScoutError
from shared.schemas.conversation import BeaconFieldSet, Conversation, ConversationSummary
from shared.schemas.sync import LedgerEntry, SyncReport, UpdateResult, UpdateStatus

logger = structlog.get_logger()


def _validate(model: type[BaseModel], payload, path: str):
    """Validate an API payload, reporting a mismatch as a decode error"""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise HelpScoutDecodeError(f"{path} returned an unexpected {model.__name__}: {e}") from e


class HelpScoutUpdater:
    """Search, extract and update HelpScout conversations."""

    def __init__(
        self,
        client: HelpScoutClient,
        ledger: LedgerStore,
        mappings: Optional[dict[str, int]] = None,
        parser: Optional[BeaconNoteParser] = None,
    ):
        self.client = client
        self.ledger = ledger
        self.parser = parser or BeaconNoteParser()
        self._mappings: dict[str, int] = dict(mappings or {})

    @property
    def mappings(self) -> dict[str, int]:
        """Beacon field name -> HelpScout custom field id"""
        return self._mappings

    def set_mappings(self, mappings: dict[str, int]):
        self._mappings = dict(mappings)

    def fetch_by_query(self, query: str) -> list[ConversationSummary]:
        """
        Search conversations and drop the ones already in the ledger.

        Args:
            query: Raw query string, appended to the search URL as is

        Returns:
            Conversation summaries in search order
        """
        path = f"search/conversations.json?{query}"
        results = self.client.request(path)
        if not isinstance(results, list):
            raise HelpScoutDecodeError(f"{path} did not return a list of conversations")
        conversations = [_validate(ConversationSummary, c, path) for c in results]

        updated_ids = self.ledger.all_ids()
        pending = [c for c in conversations if c.id not in updated_ids]

        logger.info(
            "Fetched conversations",
            total=len(conversations),
            pending=len(pending),
            skipped=len(conversations) - len(pending),
        )
        return pending

    def load(self, summary: ConversationSummary) -> Conversation:
        """Get a full conversation, threads included"""
        path = f"conversations/{summary.id}.json"
        return _validate(Conversation, self.client.request(path), path)

    def map_beacon_fields(
        self, conversations: Iterable[ConversationSummary]
    ) -> list[Optional[BeaconFieldSet]]:
        """Load each conversation and extract its Beacon fields (None when absent)"""
        return [self.parser.extract(self.load(summary)) for summary in conversations]

    def build_payload(self, field_set: BeaconFieldSet) -> str:
        """
        Build the custom field update body.
        Fields without a mapping are left out; order follows the field set.
        """
        custom_fields = [
            {"fieldId": self._mappings[name], "value": value}
            for name, value in field_set.fields.items()
            if name in self._mappings
        ]
        return json.dumps({"customFields": custom_fields})

    def update(self, field_sets: Iterable[Optional[BeaconFieldSet]]) -> list[UpdateResult]:
        """
        Push Beacon fields to HelpScout and record each conversation in the ledger.

        The ledger entry is written whether or not the request succeeded;
        the returned status tells the two apart.
        """
        results = []
        for field_set in field_sets:
            if field_set is None:
                continue

            conversation_id = field_set.conversation_id
            payload = self.build_payload(field_set)

            error = None
            try:
                self.client.request(f"conversations/{conversation_id}.json", "PUT", payload)
            except HelpScoutError as e:
                error = str(e)

            self.ledger.upsert(LedgerEntry(
                conversation_id=conversation_id,
                payload_sent=payload,
                updated_on=int(time.time()),
            ))

            if error is None:
                logger.info("Updated conversation", conversation_id=conversation_id)
                status = UpdateStatus.SENT
            else:
                logger.warning("Failed to update conversation", conversation_id=conversation_id, error=error)
                status = UpdateStatus.FAILED

            results.append(UpdateResult(
                conversation_id=conversation_id,
                status=status,
                payload=payload,
                error=error,
            ))
        return results

    def run(self, query: str) -> SyncReport:
        """Run the whole sync for one search query."""
        start = time.time()

        conversations = self.fetch_by_query(query)
        field_sets = self.map_beacon_fields(conversations)
        results = self.update(field_sets)

        extracted = sum(1 for f in field_sets if f is not None)
        sent = sum(1 for r in results if r.status == UpdateStatus.SENT)
        report = SyncReport(
            fetched=len(conversations),
            extracted=extracted,
            skipped=len(conversations) - extracted,
            sent=sent,
            failed=len(results) - sent,
            results=results,
        )

        logger.info(
            "Sync run complete",
            fetched=report.fetched,
            sent=report.sent,
            failed=report.failed,
            elapsed_seconds=round(time.time() - start, 2),
        )
        return report
