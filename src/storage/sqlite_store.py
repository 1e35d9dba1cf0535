# src/storage/sqlite_store.py — v1
"""SQLite-based key-value store (STORAGE_BACKEND=sqlite).

Uses stdlib sqlite3, no external dependency.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from storesync.storage.base_store import BaseKeyValueStore

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_items (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class SqliteStore(BaseKeyValueStore):
    """SQLite-backed store, one row per key."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    def get_item(self, key: str) -> str | None:
        row = self._conn.execute(
            "SELECT value FROM kv_items WHERE key = ?", (key,)
        ).fetchone()
        return None if row is None else row[0]

    def set_item(self, key: str, value: str) -> None:
        self._conn.execute(
            """INSERT OR REPLACE INTO kv_items (key, value, updated_at)
               VALUES (?, ?, CURRENT_TIMESTAMP)""",
            (key, value),
        )
        self._conn.commit()

    def remove_item(self, key: str) -> None:
        self._conn.execute("DELETE FROM kv_items WHERE key = ?", (key,))
        self._conn.commit()

    def keys(self) -> list[str]:
        rows = self._conn.execute("SELECT key FROM kv_items ORDER BY key").fetchall()
        return [row[0] for row in rows]

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
