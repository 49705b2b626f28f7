"""Read operations, detail fetch and cache reset."""

import logging
from typing import Any, Dict, List, Optional

from postsync.protocols import NetworkError, NotFoundError
from postsync.types import Record, sort_newest_first

logger = logging.getLogger(__name__)

BODY_UNAVAILABLE = "Content not available."


class LoaderMixin:
    """Cached reads and the detail view for SyncCore."""

    def get_merged(self) -> List[Record]:
        """Current cached list, newest first."""
        return sort_newest_first(self._cache.records.load())

    async def get_detail(self, record_id: str) -> Record:
        """Return a record with its body, fetching it remotely when needed.

        Records that already have a body, and local records, come straight
        from the cache. Otherwise the remote copy upgrades the cached one.
        On network failure (or while offline) the cached copy is returned
        and the user is alerted.

        Raises:
            NotFoundError: The id is not in the local cache.
        """
        cached = self._cache.records.find(record_id)
        if cached is None:
            self._alert("Error", "Record not found.")
            raise NotFoundError(record_id)

        if cached.body or cached.is_local:
            return cached

        if self.is_offline:
            self._alert("No connection", "Cannot download the full content of this record.")
            return cached

        try:
            remote = await self._fetcher.fetch_one(record_id)
        except (NetworkError, NotFoundError) as e:
            logger.error(f"Failed to load detail for {record_id}: {e}")
            self._alert("Network error", "Could not download the full content of this record.")
            return cached

        async with self._lock:
            records = self._cache.records.load()
            position = next((i for i, r in enumerate(records) if r.id == record_id), None)
            if position is None:
                # Deleted while the request was in flight.
                raise NotFoundError(record_id)
            complete = records[position].with_changes(
                title=remote.title,
                author_name=remote.author_name,
                date=remote.date,
                body=remote.body or BODY_UNAVAILABLE,
                is_local=False,
            )
            records[position] = complete
            self._cache.records.replace_all(records)
        return complete

    def status(self) -> Dict[str, Any]:
        """Snapshot of cache and queue state for display."""
        last_refresh = self._cache.get_meta("last_refresh_at")
        last_drain = self._cache.get_meta("last_drain_at")
        return {
            "records": len(self._cache.records.load()),
            "pending": len(self._cache.queue),
            "dead_letters": len(self._cache.queue.load_dead_letters()),
            "offline": self.is_offline,
            "last_refresh_at": last_refresh,
            "last_drain_at": last_drain,
        }

    async def clear_cache(self, confirm: Optional[Any] = None) -> bool:
        """Drop every cached record and queued intent.

        Returns:
            False if confirm declined, True once the cache is empty.
        """
        if confirm is not None and not await self._confirm(
            confirm,
            "Clear cache",
            "Local records and the sync queue will be deleted. Reloading...",
        ):
            return False

        async with self._lock:
            self._cache.clear()
        self._publish([])
        return True
