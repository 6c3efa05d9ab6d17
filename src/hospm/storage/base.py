"""Abstract key-value storage interface for hospm."""

from __future__ import annotations

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """A string key-value store holding serialized projects.

    Implementations raise ``PersistenceError`` when the underlying medium
    fails.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Missing keys are ignored."""

    def close(self) -> None:
        """Release resources held by the backend."""
