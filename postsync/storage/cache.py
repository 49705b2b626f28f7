"""Local cache: the key-value store plus its record and queue views."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from postsync.types import MutationIntent, Record, utc_now

from .queue import PendingQueue, encode_intents
from .records import RecordStore, encode_records
from .schema import ALL_KEYS, DEAD_LETTER_KEY, META_KEY, QUEUE_KEY, RECORDS_KEY
from .sqlite import SQLiteKeyValueStore

logger = logging.getLogger(__name__)


class LocalCache:
    """Owns the durable state of the synchronization core.

    Args:
        db_path: SQLite file holding every key.
    """

    def __init__(self, db_path: Path):
        self.kv = SQLiteKeyValueStore(db_path)
        self.records = RecordStore(self.kv)
        self.queue = PendingQueue(self.kv)

    @property
    def db_path(self) -> Path:
        return self.kv.db_path

    def commit(
        self,
        records: Optional[List[Record]] = None,
        intents: Optional[List[MutationIntent]] = None,
        dead_letters: Optional[List[MutationIntent]] = None,
    ) -> None:
        """Write any combination of collections in a single transaction."""
        items: Dict[str, Any] = {}
        if records is not None:
            items[RECORDS_KEY] = encode_records(records)
        if intents is not None:
            items[QUEUE_KEY] = encode_intents(intents)
        if dead_letters is not None:
            items[DEAD_LETTER_KEY] = encode_intents(dead_letters)
        self.kv.put_many(items)

    def clear(self) -> int:
        """Bulk-remove records, queue, dead letters and sync metadata."""
        removed = self.kv.delete(ALL_KEYS)
        logger.info(f"Local cache cleared ({removed} keys removed)")
        return removed

    # === Sync Metadata ===

    def get_meta(self, key: str) -> Optional[str]:
        meta = self.kv.get(META_KEY) or {}
        return meta.get(key)

    def set_meta(self, key: str, value: Optional[str] = None) -> None:
        """Set a sync metadata value. Defaults to the current time."""
        meta = self.kv.get(META_KEY) or {}
        meta[key] = value if value is not None else utc_now()
        self.kv.put(META_KEY, meta)

    def close(self):
        self.kv.close()
