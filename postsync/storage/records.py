"""Durable record collection."""

import logging
from typing import Any, Dict, List, Optional

from postsync.protocols import PersistenceError
from postsync.types import Record

from .schema import RECORDS_KEY
from .sqlite import SQLiteKeyValueStore

logger = logging.getLogger(__name__)


def encode_records(records: List[Record]) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in records]


def decode_records(raw: Any) -> List[Record]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise PersistenceError(f"Record collection must be a list, got {type(raw).__name__}")
    try:
        return [Record.from_dict(item) for item in raw]
    except (TypeError, ValueError, AttributeError) as e:
        raise PersistenceError(f"Corrupt record in cache: {e}") from e


class RecordStore:
    """The whole record collection stored under a single key.

    There is no partial-update API: callers load, transform in memory and
    replace_all. Concurrent read-modify-write cycles must be serialized by
    the caller.
    """

    def __init__(self, kv: SQLiteKeyValueStore):
        self._kv = kv

    def load(self) -> List[Record]:
        """Load all records. Empty if the cache was never initialized."""
        return decode_records(self._kv.get(RECORDS_KEY))

    def replace_all(self, records: List[Record]) -> None:
        """Atomically overwrite the whole collection."""
        self._kv.put(RECORDS_KEY, encode_records(records))
        logger.debug(f"Record store replaced ({len(records)} records)")

    def find(self, record_id: str) -> Optional[Record]:
        for record in self.load():
            if record.id == record_id:
                return record
        return None
