"""
postsync Protocol Definitions
=============================

Errors and collaborator contracts for the offline synchronization core.

Collaborators and their roles:
- RemoteSnapshotFetcher: reads the remote collection (list + single record).
- MutationSink:          acknowledges a replayed local mutation.

Error handling philosophy:
- Fetch failures raise NetworkError (OfflineError when known to be offline)
- Store read/write failures raise PersistenceError; the write is rolled back
- Missing record ids raise NotFoundError
- Invalid user input raises ValidationError (also a ValueError)
- Background operations log and swallow NetworkError; foreground ones raise
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Protocol, runtime_checkable

if TYPE_CHECKING:
    from postsync.types import MutationIntent, Record


# =============================================================================
# ERRORS
# =============================================================================


class PostSyncError(Exception):
    """Base for all postsync errors."""

    pass


class NetworkError(PostSyncError):
    """Raised when the remote source cannot be reached or answers badly."""

    pass


class OfflineError(NetworkError):
    """Raised when an operation needs the network and the core is offline."""

    pass


class PersistenceError(PostSyncError):
    """Raised when the local store cannot be read or written."""

    pass


class NotFoundError(PostSyncError):
    """Raised when a record id is missing locally or remotely."""

    def __init__(self, record_id: str, where: str = "local cache"):
        self.record_id = record_id
        self.where = where
        super().__init__(f"Record {record_id!r} not found in {where}")


class ValidationError(PostSyncError, ValueError):
    """Raised when user-supplied record fields are invalid."""

    pass


# =============================================================================
# COLLABORATORS
# =============================================================================


@runtime_checkable
class RemoteSnapshotFetcher(Protocol):
    """Interface for the remote read API.

    Implementations: DevToFetcher (httpx), test fakes.
    """

    async def fetch_list(self) -> List["Record"]:
        """Fetch the remote collection. Bodies are usually absent."""
        ...

    async def fetch_one(self, record_id: str) -> "Record":
        """Fetch a single remote record including its body.

        Raises:
            NotFoundError: The remote source has no such record.
            NetworkError: The request failed.
        """
        ...


@runtime_checkable
class MutationSink(Protocol):
    """Interface for the component that accepts replayed mutations.

    Returning normally acknowledges the intent. Raising NetworkError leaves
    it queued for the next drain.
    """

    async def submit(self, intent: "MutationIntent") -> None: ...
