"""Synchronization operations: refresh from remote and queue drain."""

import logging
from typing import Callable, List, Optional

from postsync.protocols import NetworkError, OfflineError
from postsync.types import DrainResult, Record

logger = logging.getLogger(__name__)


class SyncMixin:
    """Refresh, drain and connectivity handling for SyncCore."""

    async def refresh(
        self, manual: bool = False, is_relevant: Optional[Callable[[], bool]] = None
    ) -> List[Record]:
        """Fetch the remote snapshot and reconcile it into the cache.

        Background refreshes (manual=False) fall back to the cached list on
        network failure. Manual refreshes alert the user and raise.

        Args:
            manual: True for a user-triggered refresh (pull-to-refresh).
            is_relevant: Checked after the merge. When it returns False the
                merged list is persisted but not published to listeners.

        Returns:
            The merged list, newest first.

        Raises:
            OfflineError: manual refresh while offline.
            NetworkError: manual refresh whose fetch failed.
        """
        if self.is_offline:
            logger.debug("Offline, skipping remote refresh")
            if manual:
                self._alert("No connection", "Cannot refresh. Check your internet connection.")
                raise OfflineError("Cannot refresh while offline")
            return self.get_merged()

        try:
            remote = await self._fetcher.fetch_list()
        except NetworkError as e:
            if manual:
                logger.error(f"Manual refresh failed: {e}")
                self._alert("Error", "Could not complete the update from the remote source.")
                raise
            logger.warning(f"Background refresh failed (continuing with cached data): {e}")
            return self.get_merged()

        # The local read happens after the fetch, under the lock, so edits made
        # while the request was in flight are part of the merge.
        async with self._lock:
            merged = self._reconciler.reconcile(remote)
            self._cache.set_meta("last_refresh_at")

        if is_relevant is None or is_relevant():
            self._publish(merged)
        else:
            logger.debug("Refresh result no longer wanted, not publishing")
        return merged

    async def drain(self) -> DrainResult:
        """Replay the pending queue. Serialized with every other writer."""
        async with self._lock:
            pending = len(self._cache.queue)
            if pending == 0:
                logger.debug("Sync queue empty, nothing to do")
                return DrainResult()

            self._alert("Syncing", f"Processing {pending} pending changes...")
            result = await self._processor.drain()
            self._cache.set_meta("last_drain_at")

        if result.success:
            self._alert("Success", "Sync complete!")
        else:
            logger.warning(f"Drain finished with {len(result.errors)} errors: {result.errors[:3]}")
            self._alert(
                "Error",
                f"Sync failed: {result.requeued} changes still pending, "
                f"{result.dead_lettered} given up.",
            )
        self._publish(self.get_merged())
        return result

    async def requeue_dead_letters(self) -> int:
        """Move dead-lettered intents back to the queue for the next drain."""
        async with self._lock:
            moved = self._cache.queue.requeue_dead_letters()
        return moved

    async def _on_reconnect(self) -> None:
        """Drain once per offline -> online edge."""
        logger.info("Connection restored, processing sync queue")
        await self.drain()

    def _on_connectivity_change(self, online: bool) -> None:
        for callback in list(self._offline_listeners):
            try:
                callback(not online)
            except Exception as e:
                logger.error(f"Offline listener failed: {e}", exc_info=True)
