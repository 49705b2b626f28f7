"""Schema for the postsync local cache."""

import sqlite3

SCHEMA_VERSION = 1

# Logical keys stored in kv_store.
RECORDS_KEY = "records"
QUEUE_KEY = "sync_queue"
DEAD_LETTER_KEY = "sync_dead_letters"
META_KEY = "sync_meta"

ALL_KEYS = (RECORDS_KEY, QUEUE_KEY, DEAD_LETTER_KEY, META_KEY)

SCHEMA = """
-- Whole-value key/value blobs. Each value is one JSON document.
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);
"""


def init_db(conn: sqlite3.Connection) -> None:
    """Create tables if missing and stamp the schema version."""
    conn.executescript(SCHEMA)
    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    if row is None or row[0] is None:
        conn.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
