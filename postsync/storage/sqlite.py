"""SQLite-backed key-value persistence for postsync.

Each key holds one JSON document that is read and overwritten as a whole.
Multi-key writes share a single transaction, so the record collection and
the pending queue can be committed together.
"""

import contextlib
import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Iterable

from postsync.protocols import PersistenceError
from postsync.types import utc_now

from .schema import init_db

logger = logging.getLogger(__name__)


class SQLiteKeyValueStore:
    """Durable whole-value store keyed by name.

    Args:
        db_path: Database file. Parent directories are created on demand.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with self._connect() as conn:
                init_db(conn)
        except OSError as e:
            raise PersistenceError(f"Cannot create cache directory for {self.db_path}: {e}") from e

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=5000")
        return conn

    @contextlib.contextmanager
    def _connect(self):
        """Context manager that handles transactions AND closes connection.

        Commits on success, rolls back on any exception, and converts
        sqlite3 errors into PersistenceError.
        """
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open cache database {self.db_path}: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            logger.debug(f"Transaction failed, rolling back: {e}")
            conn.rollback()
            raise PersistenceError(f"Cache database error: {e}") from e
        except Exception as e:
            logger.debug(f"Transaction failed, rolling back: {e}")
            conn.rollback()
            raise
        finally:
            conn.close()

    def get(self, key: str, default: Any = None) -> Any:
        """Read and decode the whole value stored under key."""
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Corrupt value stored under {key!r}: {e}") from e

    def put(self, key: str, value: Any) -> None:
        self.put_many({key: value})

    def put_many(self, items: Dict[str, Any]) -> None:
        """Overwrite several keys in one transaction. All or nothing."""
        if not items:
            return
        try:
            encoded = {key: json.dumps(value) for key, value in items.items()}
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Cannot encode value for cache: {e}") from e

        now = utc_now()
        with self._connect() as conn:
            conn.executemany(
                "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
                [(key, value, now) for key, value in encoded.items()],
            )

    def delete(self, keys: Iterable[str]) -> int:
        """Remove keys in one transaction. Returns how many existed."""
        keys = list(keys)
        if not keys:
            return 0
        placeholders = ",".join("?" * len(keys))
        with self._connect() as conn:
            cursor = conn.execute(f"DELETE FROM kv_store WHERE key IN ({placeholders})", keys)
            return cursor.rowcount

    def close(self):
        """Connections are per-operation; nothing to release."""
        pass
