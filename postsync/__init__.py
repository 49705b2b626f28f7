"""
postsync - Offline-first content cache with queued local edits.

Local records stay usable without a connection; edits are queued and
replayed when connectivity returns.
"""

from importlib.metadata import PackageNotFoundError, version

from .core import SyncCore
from .protocols import (
    NetworkError,
    NotFoundError,
    OfflineError,
    PersistenceError,
    PostSyncError,
    ValidationError,
)
from .types import DrainResult, MutationIntent, MutationKind, Record, SyncStatus

try:
    __version__ = version("postsync")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "SyncCore",
    "Record",
    "MutationIntent",
    "MutationKind",
    "SyncStatus",
    "DrainResult",
    "PostSyncError",
    "NetworkError",
    "OfflineError",
    "PersistenceError",
    "NotFoundError",
    "ValidationError",
]
