"""
Shared record types for postsync.

Record and MutationIntent are the vocabulary shared by the stores, the
reconciliation engine, the queue processor and the UI layer. They serialize
to plain dicts so the key-value store can persist them as JSON.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

LOCAL_ID_PREFIX = "local_"
LOCAL_AUTHOR_NAME = "Local User"

# Sort position for records whose date is missing or unparseable.
_MIN_DATE = datetime.min.replace(tzinfo=timezone.utc)


# === Shared Utility Functions ===


def utc_now() -> str:
    """Get current timestamp as ISO string in UTC."""
    return datetime.now(timezone.utc).isoformat()


def parse_datetime(s: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string. Returns None for empty or invalid input.

    Naive values are taken to be UTC so they compare with aware ones.
    """
    if not s:
        return None
    try:
        parsed = datetime.fromisoformat(str(s).replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_local_id(record_id: str) -> bool:
    """Check whether an id was synthesized locally."""
    return str(record_id).startswith(LOCAL_ID_PREFIX)


# === Enums ===


class SyncStatus(str, Enum):
    """Replay state of a record's most recent local mutation."""

    NONE = "none"  # Clean mirror of the remote record
    PENDING = "pending"  # A queued mutation has not been replayed yet
    SYNCED = "synced"  # The last replayed mutation was acknowledged

    @classmethod
    def parse(cls, value: Any) -> "SyncStatus":
        """Parse a persisted value. Missing or null means NONE."""
        if value is None or value == "":
            return cls.NONE
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.NONE


class MutationKind(str, Enum):
    """Kind of a queued local mutation."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


# === Records ===


@dataclass
class Record:
    """A content item mirrored between the remote source and the local cache."""

    id: str
    title: str
    summary: str = ""
    body: Optional[str] = None
    author_name: str = ""
    date: Optional[str] = None  # ISO-8601
    is_local: bool = False
    sync_status: SyncStatus = SyncStatus.NONE

    @property
    def parsed_date(self) -> Optional[datetime]:
        return parse_datetime(self.date)

    def sort_key(self) -> datetime:
        """Key for newest-first ordering; undated records sort last."""
        return self.parsed_date or _MIN_DATE

    def with_changes(self, **changes: Any) -> "Record":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "body": self.body,
            "author_name": self.author_name,
            "date": self.date,
            "is_local": self.is_local,
            "sync_status": self.sync_status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        """Build a Record from a persisted or remote dict.

        Accepts the camelCase keys used by older caches as well.
        """
        if "id" not in data or data["id"] is None:
            raise ValueError("record is missing an id")
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            summary=data.get("summary") or "",
            body=data.get("body"),
            author_name=data.get("author_name", data.get("authorName")) or "",
            date=data.get("date"),
            is_local=bool(data.get("is_local", data.get("isLocal", False))),
            sync_status=SyncStatus.parse(data.get("sync_status", data.get("syncStatus"))),
        )


def sort_newest_first(records: List[Record]) -> List[Record]:
    """Return records sorted by date descending. Stable for equal dates."""
    return sorted(records, key=lambda r: r.sort_key(), reverse=True)


@dataclass
class MutationIntent:
    """A durable record of a pending local change awaiting replay."""

    kind: MutationKind
    record_id: str
    payload: Optional[Record] = None  # Snapshot for CREATE/UPDATE, None for DELETE
    queued_at: str = field(default_factory=utc_now)
    attempts: int = 0
    last_error: Optional[str] = None

    @classmethod
    def create(cls, record: Record) -> "MutationIntent":
        return cls(kind=MutationKind.CREATE, record_id=record.id, payload=record)

    @classmethod
    def update(cls, record: Record) -> "MutationIntent":
        return cls(kind=MutationKind.UPDATE, record_id=record.id, payload=record)

    @classmethod
    def delete(cls, record_id: str) -> "MutationIntent":
        return cls(kind=MutationKind.DELETE, record_id=record_id)

    def to_dict(self) -> Dict[str, Any]:
        if self.payload is not None:
            payload = self.payload.to_dict()
        else:
            payload = {"id": self.record_id}
        return {
            "type": self.kind.value,
            "payload": payload,
            "queued_at": self.queued_at,
            "attempts": self.attempts,
            "last_error": self.last_error,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MutationIntent":
        kind = MutationKind(str(data["type"]).upper())
        payload_data = data.get("payload") or {}
        record_id = str(payload_data.get("id", data.get("record_id", "")))
        if not record_id:
            raise ValueError("mutation intent is missing a record id")
        payload = None
        if kind is not MutationKind.DELETE and "title" in payload_data:
            payload = Record.from_dict(payload_data)
        return cls(
            kind=kind,
            record_id=record_id,
            payload=payload,
            queued_at=data.get("queued_at") or utc_now(),
            attempts=int(data.get("attempts") or 0),
            last_error=data.get("last_error"),
        )


# === Sync Results ===


@dataclass
class MergeOutcome:
    """Result of merging a remote snapshot with the local collection."""

    records: List[Record] = field(default_factory=list)
    added: int = 0  # Remote records with no local counterpart
    local_wins: int = 0
    remote_wins: int = 0
    local_only: int = 0  # Local records absent from the snapshot


@dataclass
class DrainResult:
    """Result of replaying the pending queue."""

    processed: int = 0  # Intents taken from the queue this drain
    applied: int = 0  # Acknowledged and visible in the record store
    skipped: int = 0  # Acknowledged but no matching record
    requeued: int = 0  # Left in the queue for the next drain
    dead_lettered: int = 0  # Moved out after too many attempts
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0

    @property
    def acknowledged(self) -> int:
        return self.applied + self.skipped
