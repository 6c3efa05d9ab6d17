"""hospm storage layer."""

from hospm.storage.base import StorageBackend
from hospm.storage.memory_store import MemoryStore
from hospm.storage.sqlite_store import SQLiteStore

__all__ = ["MemoryStore", "SQLiteStore", "StorageBackend"]
