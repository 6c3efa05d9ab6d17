"""SQLite key-value storage backend."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from hospm.errors import PersistenceError
from hospm.storage.base import StorageBackend

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
)
"""


class SQLiteStore(StorageBackend):
    """Stores values in a single ``kv`` table of a SQLite file."""

    def __init__(self, db_path: Path, *, wal_mode: bool = True) -> None:
        self.db_path = db_path
        self.wal_mode = wal_mode
        self._db: sqlite3.Connection | None = None

    def initialize(self) -> None:
        """Create the database file and schema."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._db = sqlite3.connect(str(self.db_path))
            if self.wal_mode:
                self._db.execute("PRAGMA journal_mode=WAL")
            self._db.execute(_SCHEMA)
            self._db.commit()
        except (OSError, sqlite3.Error) as e:
            raise PersistenceError(f"Cannot open store at {self.db_path}: {e}") from e
        logger.info("Initialized SQLite store at %s", self.db_path)

    def close(self) -> None:
        if self._db:
            self._db.close()
            self._db = None

    @property
    def db(self) -> sqlite3.Connection:
        if self._db is None:
            raise PersistenceError("Store not initialized. Call initialize() first.")
        return self._db

    def get(self, key: str) -> str | None:
        try:
            row = self.db.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Read of {key!r} failed: {e}") from e
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            self.db.execute(
                """INSERT INTO kv (key, value, updated_at) VALUES (?, ?, datetime('now'))
                   ON CONFLICT(key) DO UPDATE SET
                   value = excluded.value, updated_at = excluded.updated_at""",
                (key, value),
            )
            self.db.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Write of {key!r} failed: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self.db.execute("DELETE FROM kv WHERE key = ?", (key,))
            self.db.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Delete of {key!r} failed: {e}") from e
