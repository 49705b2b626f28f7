"""
Pytest fixtures and test configuration for postsync tests.
"""

import asyncio
from typing import Dict, List, Optional, Set

import pytest

from postsync.config import Settings
from postsync.core import SyncCore
from postsync.protocols import NetworkError, NotFoundError
from postsync.storage import LocalCache
from postsync.sync import ConnectivityMonitor
from postsync.types import MutationIntent, Record, SyncStatus


class FakeFetcher:
    """In-memory RemoteSnapshotFetcher.

    Set `error` to make every call fail, or `gate` to hold fetch_list until
    the event is set.
    """

    def __init__(self, records: Optional[List[Record]] = None):
        self.records: List[Record] = list(records or [])
        self.details: Dict[str, Record] = {}
        self.error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.list_calls = 0
        self.detail_calls = 0

    async def fetch_list(self) -> List[Record]:
        self.list_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return [r.with_changes() for r in self.records]

    async def fetch_one(self, record_id: str) -> Record:
        self.detail_calls += 1
        if self.error is not None:
            raise self.error
        if record_id not in self.details:
            raise NotFoundError(record_id, where="remote source")
        return self.details[record_id]


class RecordingSink:
    """MutationSink that records submissions.

    Rejects intents for ids in `reject_ids`, and the Nth submit call (1-based)
    for every N in `reject_calls`.
    """

    def __init__(self):
        self.submitted: List[MutationIntent] = []
        self.reject_ids: Set[str] = set()
        self.reject_calls: Set[int] = set()
        self.calls = 0

    async def submit(self, intent: MutationIntent) -> None:
        self.calls += 1
        if intent.record_id in self.reject_ids or self.calls in self.reject_calls:
            raise NetworkError(f"backend unavailable for {intent.record_id}")
        self.submitted.append(intent)
        # Yield so overlapping drains get a chance to interleave.
        await asyncio.sleep(0)


@pytest.fixture
def record_factory():
    """Build Records with sensible defaults."""

    def _make(record_id: str, date: str = "2024-01-01T00:00:00+00:00", **overrides) -> Record:
        fields = {
            "id": record_id,
            "title": f"Title {record_id}",
            "summary": f"Summary {record_id}",
            "body": None,
            "author_name": "Remote Author",
            "date": date,
            "is_local": False,
            "sync_status": SyncStatus.NONE,
        }
        fields.update(overrides)
        return Record(**fields)

    return _make


@pytest.fixture
def db_path(tmp_path):
    """Create a temporary database path."""
    return tmp_path / "cache.db"


@pytest.fixture
def cache(db_path):
    """A LocalCache on a fresh SQLite file."""
    cache = LocalCache(db_path)
    yield cache
    cache.close()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def monitor():
    return ConnectivityMonitor(online=True)


@pytest.fixture
def settings(db_path):
    return Settings(db_path=db_path, max_attempts=3)


@pytest.fixture
def alerts():
    """Alerts raised by the core, as (title, message) tuples."""
    return []


@pytest.fixture
def core(cache, fetcher, sink, monitor, settings, alerts):
    """A SyncCore wired to in-memory collaborators."""
    core = SyncCore(
        cache=cache,
        fetcher=fetcher,
        sink=sink,
        monitor=monitor,
        settings=settings,
        alert=lambda title, message: alerts.append((title, message)),
    )
    yield core
    core.close()
