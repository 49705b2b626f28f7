"""Local mutation operations (the enqueue path).

Each operation updates the record collection and appends the matching
MutationIntent in one transaction, so the cache never shows a change that
is missing from the queue.
"""

import logging
import uuid
from typing import Any, Mapping, Optional

from postsync.protocols import NotFoundError
from postsync.types import (
    LOCAL_AUTHOR_NAME,
    LOCAL_ID_PREFIX,
    MutationIntent,
    Record,
    SyncStatus,
    utc_now,
)

logger = logging.getLogger(__name__)


def new_local_id() -> str:
    return f"{LOCAL_ID_PREFIX}{uuid.uuid4().hex}"


class WritersMixin:
    """Create, update and delete for records edited locally."""

    async def create_local(self, fields: Mapping[str, Any]) -> Record:
        """Create a local record and queue a CREATE intent.

        Args:
            fields: title, summary and body (all required).

        Returns:
            The new record, tagged PENDING.
        """
        cleaned = self._validate_fields(fields)
        record = Record(
            id=new_local_id(),
            title=cleaned["title"],
            summary=cleaned["summary"],
            body=cleaned["body"],
            author_name=LOCAL_AUTHOR_NAME,
            date=utc_now(),
            is_local=True,
            sync_status=SyncStatus.PENDING,
        )

        async with self._lock:
            records = self._cache.records.load()
            intents = self._cache.queue.load()
            intents.append(MutationIntent.create(record))
            self._cache.commit(records=[record] + records, intents=intents)

        logger.info(f"Created local record {record.id}")
        self._alert("Saved", "Record created locally.")
        self._publish(self.get_merged())
        return record

    async def update_existing(self, record_id: str, fields: Mapping[str, Any]) -> Record:
        """Edit a cached record and queue an UPDATE intent.

        Fields not given keep their current value; the result must still
        have a non-blank title, summary and body.

        Raises:
            NotFoundError: No cached record has this id.
        """
        async with self._lock:
            records = self._cache.records.load()
            position = next((i for i, r in enumerate(records) if r.id == record_id), None)
            if position is None:
                raise NotFoundError(record_id)

            existing = records[position]
            merged_fields = {
                "title": existing.title,
                "summary": existing.summary,
                "body": existing.body,
            }
            merged_fields.update(fields)
            cleaned = self._validate_fields(merged_fields)

            updated = existing.with_changes(
                date=utc_now(), sync_status=SyncStatus.PENDING, **cleaned
            )
            records[position] = updated
            intents = self._cache.queue.load()
            intents.append(MutationIntent.update(updated))
            self._cache.commit(records=records, intents=intents)

        logger.info(f"Updated record {record_id} locally")
        self._alert("Saved", "Record updated locally.")
        self._publish(self.get_merged())
        return updated

    async def delete_record(self, record_id: str, confirm: Optional[Any] = None) -> bool:
        """Remove a cached record and queue a DELETE intent.

        Args:
            record_id: Record to delete.
            confirm: Optional callable(title, message) returning (or awaiting
                to) a bool. Deletion is skipped when it answers False.

        Returns:
            True if the record was deleted, False if the user declined.

        Raises:
            NotFoundError: No cached record has this id.
        """
        if self._cache.records.find(record_id) is None:
            raise NotFoundError(record_id)

        if confirm is not None and not await self._confirm(
            confirm,
            "Confirm deletion",
            "Delete this record? It is removed locally and queued for sync.",
        ):
            logger.debug(f"Deletion of {record_id} cancelled")
            return False

        async with self._lock:
            records = self._cache.records.load()
            remaining = [r for r in records if r.id != record_id]
            if len(remaining) == len(records):
                raise NotFoundError(record_id)
            intents = self._cache.queue.load()
            intents.append(MutationIntent.delete(record_id))
            self._cache.commit(records=remaining, intents=intents)

        logger.info(f"Deleted record {record_id} locally")
        self._publish(self.get_merged())
        return True
