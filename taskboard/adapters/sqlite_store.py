"""SQLite key-value adapter — implements KeyValueStore.

Plays the role the browser's localStorage plays for the web board: one
row per key, the value is an opaque JSON string owned by the caller.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from taskboard.ports.storage_port import StorageError

logger = logging.getLogger(__name__)


class SQLiteKeyValueStore:
    """SQLite-backed string store."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from taskboard.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key   TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
        logger.debug("Key-value table initialized at %s", self._db_path)

    def get_item(self, key: str) -> str | None:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read {key!r}: {exc}") from exc
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    (key, value),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to write {key!r}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to remove {key!r}: {exc}") from exc
