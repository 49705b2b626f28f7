"""Durable queue of pending local mutations.

The queue is an ordered JSON list. Replay order is enqueue order and the
queue is never deduplicated: two updates of the same record are both kept
and both replayed. Intents that fail too often are parked in a separate
dead-letter list until requeued.
"""

import logging
from typing import Any, Dict, List

from postsync.protocols import PersistenceError
from postsync.types import MutationIntent

from .schema import DEAD_LETTER_KEY, QUEUE_KEY
from .sqlite import SQLiteKeyValueStore

logger = logging.getLogger(__name__)


def encode_intents(intents: List[MutationIntent]) -> List[Dict[str, Any]]:
    return [i.to_dict() for i in intents]


def decode_intents(raw: Any) -> List[MutationIntent]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise PersistenceError(f"Sync queue must be a list, got {type(raw).__name__}")
    try:
        return [MutationIntent.from_dict(item) for item in raw]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise PersistenceError(f"Corrupt entry in sync queue: {e}") from e


class PendingQueue:
    """FIFO of MutationIntents stored under a single key."""

    def __init__(self, kv: SQLiteKeyValueStore):
        self._kv = kv

    def load(self) -> List[MutationIntent]:
        return decode_intents(self._kv.get(QUEUE_KEY))

    def __len__(self) -> int:
        return len(self.load())

    # === Dead letters ===

    def load_dead_letters(self) -> List[MutationIntent]:
        return decode_intents(self._kv.get(DEAD_LETTER_KEY))

    def requeue_dead_letters(self) -> int:
        """Move dead-lettered intents back to the end of the queue.

        Attempts and last error are reset. Returns how many were moved.
        """
        dead = self.load_dead_letters()
        if not dead:
            return 0
        for intent in dead:
            intent.attempts = 0
            intent.last_error = None
        self._kv.put_many(
            {
                QUEUE_KEY: encode_intents(self.load() + dead),
                DEAD_LETTER_KEY: [],
            }
        )
        logger.info(f"Requeued {len(dead)} dead-lettered intents")
        return len(dead)
