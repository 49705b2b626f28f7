"""SyncCore: the single owner of the offline cache.

Every read-modify-write of the record collection or the pending queue
(reconcile, drain, the enqueue path, detail upgrades, cache reset) runs
inside one asyncio.Lock, so no two of them interleave their read and
write halves.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, List, Optional

from postsync.config import Settings, get_settings
from postsync.core.loader import LoaderMixin
from postsync.core.sync import SyncMixin
from postsync.core.validation import ValidationMixin
from postsync.core.writers import WritersMixin
from postsync.protocols import MutationSink, RemoteSnapshotFetcher
from postsync.remote import DevToFetcher, SimulatedMutationSink
from postsync.storage import LocalCache
from postsync.sync import ConnectivityMonitor, QueueProcessor, ReconciliationEngine
from postsync.types import Record

logger = logging.getLogger(__name__)

AlertFn = Callable[[str, str], None]
RecordsListener = Callable[[List[Record]], None]
OfflineListener = Callable[[bool], None]


def _log_alert(title: str, message: str) -> None:
    logger.info(f"{title}: {message}")


class SyncCore(
    LoaderMixin,
    WritersMixin,
    SyncMixin,
    ValidationMixin,
):
    """Main interface between the UI layer and the synchronization core.

    Examples:
        core = SyncCore()
        await core.refresh()
        await core.create_local({"title": "T", "summary": "S", "body": "B"})

    Args:
        cache: Local cache. Defaults to the configured SQLite file.
        fetcher: Remote read API. Defaults to dev.to.
        sink: Acknowledges replayed mutations. Defaults to simulated acceptance.
        monitor: Connectivity signal. The core drains on each reconnect edge.
        settings: Configuration; get_settings() when omitted.
        alert: Callable(title, message) for user-facing notifications.
    """

    def __init__(
        self,
        cache: Optional[LocalCache] = None,
        fetcher: Optional[RemoteSnapshotFetcher] = None,
        sink: Optional[MutationSink] = None,
        monitor: Optional[ConnectivityMonitor] = None,
        settings: Optional[Settings] = None,
        alert: Optional[AlertFn] = None,
    ):
        self.settings = settings or get_settings()
        self._cache = cache or LocalCache(self.settings.resolved_db_path())
        self._fetcher = fetcher or DevToFetcher(
            base_url=self.settings.api_base_url,
            per_page=self.settings.list_per_page,
            timeout=self.settings.request_timeout,
        )
        self._sink = sink or SimulatedMutationSink()
        self.monitor = monitor or ConnectivityMonitor(
            online=True,
            probe_url=self.settings.resolved_probe_url(),
            cache_ttl=self.settings.connectivity_cache_ttl,
        )
        self._alert = alert or _log_alert

        self._lock = asyncio.Lock()
        self._reconciler = ReconciliationEngine(self._cache.records)
        self._processor = QueueProcessor(
            self._cache, self._sink, max_attempts=self.settings.max_attempts
        )

        self._listeners: List[RecordsListener] = []
        self._offline_listeners: List[OfflineListener] = []
        self._unsubscribe = [
            self.monitor.on_reconnect(self._on_reconnect),
            self.monitor.add_listener(self._on_connectivity_change),
        ]

    @property
    def cache(self) -> LocalCache:
        return self._cache

    @property
    def is_offline(self) -> bool:
        return self.monitor.is_offline

    # === UI subscriptions ===

    def add_listener(self, callback: RecordsListener) -> Callable[[], None]:
        """Call callback(records) whenever the merged list changes."""
        self._listeners.append(callback)
        return lambda: self._listeners.remove(callback) if callback in self._listeners else None

    def add_offline_listener(self, callback: OfflineListener) -> Callable[[], None]:
        """Call callback(is_offline) whenever connectivity changes."""
        self._offline_listeners.append(callback)
        return lambda: (
            self._offline_listeners.remove(callback)
            if callback in self._offline_listeners
            else None
        )

    def _publish(self, records: List[Record]) -> None:
        for callback in list(self._listeners):
            try:
                callback(records)
            except Exception as e:
                logger.error(f"Records listener failed: {e}", exc_info=True)

    async def _confirm(self, confirm: Callable[..., Any], title: str, message: str) -> bool:
        answer = confirm(title, message)
        if inspect.isawaitable(answer):
            answer = await answer
        return bool(answer)

    def close(self) -> None:
        """Detach from the connectivity monitor and release the cache."""
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        self._cache.close()
