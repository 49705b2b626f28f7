"""postsync storage.

Local-first persistence for the record collection and the pending
mutation queue, using SQLite as a durable key-value store.
"""

from .cache import LocalCache
from .queue import PendingQueue
from .records import RecordStore
from .schema import DEAD_LETTER_KEY, META_KEY, QUEUE_KEY, RECORDS_KEY
from .sqlite import SQLiteKeyValueStore

__all__ = [
    "LocalCache",
    "PendingQueue",
    "RecordStore",
    "SQLiteKeyValueStore",
    # Keys
    "RECORDS_KEY",
    "QUEUE_KEY",
    "DEAD_LETTER_KEY",
    "META_KEY",
]
