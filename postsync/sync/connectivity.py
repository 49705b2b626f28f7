"""Connectivity monitor.

Holds the current online/offline state and notifies listeners when it
changes. Reconnect listeners fire only on the offline -> online edge,
never on repeated "still online" reports. State can be pushed in by the
host platform via set_online() or discovered with an HTTP probe.
"""

import asyncio
import inspect
import logging
import time
from typing import Any, Callable, List, Optional, Set

import httpx

logger = logging.getLogger(__name__)

CONNECTIVITY_TIMEOUT = 3.0

Listener = Callable[..., Any]


class ConnectivityMonitor:
    """Online/offline signal with edge detection.

    Args:
        online: Initial state. The first reconnect edge needs a prior offline report.
        probe_url: URL fetched by probe(). None disables probing.
        timeout: Probe request timeout in seconds.
        cache_ttl: Seconds a probe result is reused.
        client: Optional shared httpx.AsyncClient for probes.
    """

    def __init__(
        self,
        online: bool = True,
        probe_url: Optional[str] = None,
        timeout: float = CONNECTIVITY_TIMEOUT,
        cache_ttl: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._online = online
        self.probe_url = probe_url
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self._client = client
        self._last_probe_at: Optional[float] = None
        self._last_probe_result = online
        self._change_listeners: List[Listener] = []
        self._reconnect_listeners: List[Listener] = []
        self._tasks: Set[asyncio.Task] = set()

    @property
    def is_online(self) -> bool:
        return self._online

    @property
    def is_offline(self) -> bool:
        return not self._online

    def add_listener(self, callback: Listener) -> Callable[[], None]:
        """Call callback(online) on every state change. Returns an unsubscribe function."""
        self._change_listeners.append(callback)
        return lambda: self._remove(self._change_listeners, callback)

    def on_reconnect(self, callback: Listener) -> Callable[[], None]:
        """Call callback() on each offline -> online edge. Returns an unsubscribe function."""
        self._reconnect_listeners.append(callback)
        return lambda: self._remove(self._reconnect_listeners, callback)

    @staticmethod
    def _remove(listeners: List[Listener], callback: Listener) -> None:
        if callback in listeners:
            listeners.remove(callback)

    def set_online(self, online: bool) -> bool:
        """Report the current state.

        Coroutine listeners need a running event loop. Without one they are
        skipped with a warning, and the caller must act on the returned edge
        itself (for example by awaiting SyncCore.drain()).

        Returns:
            True if this report is an offline -> online edge.
        """
        previous = self._online
        self._online = online
        if previous == online:
            return False

        reconnected = online and not previous
        if reconnected:
            logger.info("Connection restored")
        else:
            logger.info("Connection lost, changes will be queued")

        for callback in list(self._change_listeners):
            self._dispatch(callback, online)
        if reconnected:
            for callback in list(self._reconnect_listeners):
                self._dispatch(callback)
        return reconnected

    def _dispatch(self, callback: Listener, *args: Any) -> None:
        """Run a listener. Coroutines are scheduled as tasks on the running loop."""
        try:
            outcome = callback(*args)
        except Exception as e:
            logger.error(f"Connectivity listener failed: {e}", exc_info=True)
            return
        if not inspect.isawaitable(outcome):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(outcome):
                outcome.close()
            logger.warning(
                f"No running event loop, async connectivity listener {callback!r} skipped"
            )
            return
        task = asyncio.ensure_future(outcome, loop=loop)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Connectivity listener task failed: {exc}", exc_info=exc)

    async def wait_idle(self) -> None:
        """Wait until every scheduled listener task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # === Probing ===

    async def probe(self, force: bool = False) -> bool:
        """Check whether probe_url is reachable. Results are cached for cache_ttl."""
        if not self.probe_url:
            return self._online

        now = time.monotonic()
        if (
            not force
            and self._last_probe_at is not None
            and now - self._last_probe_at < self.cache_ttl
        ):
            return self._last_probe_result

        reachable = False
        try:
            if self._client is not None:
                response = await self._client.get(self.probe_url, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(self.probe_url)
            reachable = response.status_code < 500
        except httpx.HTTPError as e:
            logger.debug(f"Connectivity check failed: {e}")

        self._last_probe_at = now
        self._last_probe_result = reachable
        return reachable

    async def check(self, force: bool = False) -> bool:
        """Probe and report the result through set_online()."""
        online = await self.probe(force=force)
        self.set_online(online)
        return online

    async def watch(self, interval: float, stop: Optional[asyncio.Event] = None) -> None:
        """Probe every interval seconds until stop is set."""
        stop = stop or asyncio.Event()
        while not stop.is_set():
            await self.check(force=True)
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue
