"""In-memory storage backend."""

from __future__ import annotations

from hospm.storage.base import StorageBackend


class MemoryStore(StorageBackend):
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)
