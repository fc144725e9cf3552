"""
Ledger storage for HSC Beacon Sync
Remembers which conversations already had their Beacon fields pushed
"""

from typing import Optional, Protocol

import structlog
from arango import ArangoClient
from arango.database import StandardDatabase
from arango.exceptions import ArangoError

from shared.config import DEFAULT_LEDGER_COLLECTION, SyncSettings
from shared.errors import LedgerUnavailableError
from shared.schemas.sync import LedgerEntry

logger = structlog.get_logger()


class LedgerStore(Protocol):
    """Durable set of processed conversation ids"""

    def contains(self, conversation_id: str) -> bool: ...

    def all_ids(self) -> set[str]: ...

    def upsert(self, entry: LedgerEntry) -> None: ...

    def get(self, conversation_id: str) -> Optional[LedgerEntry]: ...


class InMemoryLedgerStore:
    """Ledger kept in a dict; lost when the process exits"""

    def __init__(self, entries: Optional[list[LedgerEntry]] = None):
        self._entries: dict[str, LedgerEntry] = {}
        for entry in entries or []:
            self.upsert(entry)

    def contains(self, conversation_id: str) -> bool:
        return str(conversation_id) in self._entries

    def all_ids(self) -> set[str]:
        return set(self._entries)

    def upsert(self, entry: LedgerEntry) -> None:
        self._entries[entry.conversation_id] = entry

    def get(self, conversation_id: str) -> Optional[LedgerEntry]:
        return self._entries.get(str(conversation_id))

    def check_health(self) -> bool:
        return True


class ArangoLedgerStore:
    """
    Ledger in an ArangoDB collection

    Documents are keyed by conversation id:
        {"_key": "123", "convo_id": "123", "payload_sent": "...", "updated_on": 1700000000}
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8529,
        database: str = "hsc",
        username: str = "root",
        password: str = "",
        collection: str = DEFAULT_LEDGER_COLLECTION,
        db: Optional[StandardDatabase] = None,
    ):
        self.host = host
        self.port = port
        self.database_name = database
        self.username = username
        self.password = password
        self.collection_name = collection
        self._client: Optional[ArangoClient] = None
        self._db = db
        if self._db is None:
            self._connect()
        self._ensure_collection()

    @classmethod
    def from_settings(cls, settings: SyncSettings) -> "ArangoLedgerStore":
        return cls(
            host=settings.arango_host,
            port=settings.arango_port,
            database=settings.arango_db,
            username=settings.arango_user,
            password=settings.arango_password,
            collection=settings.ledger_collection,
        )

    def _connect(self):
        """Establish connection to ArangoDB"""
        try:
            self._client = ArangoClient(hosts=f"http://{self.host}:{self.port}")
            # Connect without auth (dev mode) or with credentials
            if self.password:
                self._db = self._client.db(
                    self.database_name, username=self.username, password=self.password
                )
            else:
                self._db = self._client.db(self.database_name)
        except Exception as e:
            logger.error("Failed to connect to ArangoDB", error=str(e))
            raise

    def _ensure_collection(self):
        """Create the ledger collection if missing; first call that reaches the server"""
        try:
            if not self._db.has_collection(self.collection_name):
                self._db.create_collection(self.collection_name)
                logger.info("Created ledger collection", name=self.collection_name)
        except (ArangoError, ConnectionError) as e:
            logger.warning("ArangoDB is unreachable", host=self.host, database=self.database_name, error=str(e))
            raise LedgerUnavailableError(f"Ledger database is unreachable: {e}") from e
        logger.info("Connected to ArangoDB", host=self.host, database=self.database_name)

    @property
    def _collection(self):
        return self._db.collection(self.collection_name)

    def check_health(self) -> bool:
        """Check database connectivity"""
        try:
            self._db.version()
            return True
        except Exception as e:
            logger.warning("ArangoDB health check failed", error=str(e))
        return False

    def contains(self, conversation_id: str) -> bool:
        return self._collection.has(str(conversation_id))

    def all_ids(self) -> set[str]:
        cursor = self._db.aql.execute(
            "FOR d IN @@ledger RETURN d._key",
            bind_vars={"@ledger": self.collection_name},
        )
        return set(cursor)

    def upsert(self, entry: LedgerEntry) -> None:
        """Insert or overwrite the entry for a conversation"""
        doc = {
            "_key": entry.conversation_id,
            "convo_id": entry.conversation_id,
            "payload_sent": entry.payload_sent,
            "updated_on": entry.updated_on,
        }
        self._collection.insert(doc, overwrite=True)

    def get(self, conversation_id: str) -> Optional[LedgerEntry]:
        doc = self._collection.get(str(conversation_id))
        if not doc:
            return None
        return LedgerEntry(
            conversation_id=doc["convo_id"],
            payload_sent=doc["payload_sent"],
            updated_on=doc["updated_on"],
        )
