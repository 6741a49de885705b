"""Storage backend interface for notevc.

A backend is a process-wide keyed collection: document id → serialized
history text.  Writers always replace a document's whole history in one
call, and implementations must make that replace atomic so that an
interrupted write never leaves a partial history behind.
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Abstract keyed text store.

    Implementations raise :class:`~notevc.errors.StorageCapacityError`
    from :meth:`write` when the new value would not fit.
    """

    @abstractmethod
    def read(self, key: str) -> str | None:
        """Return the text stored under ``key`` or ``None``."""

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Atomically replace the text stored under ``key``."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``.  Deleting a missing key is not an error."""

    @abstractmethod
    def keys(self) -> list[str]:
        """Return every stored key."""

    def clear(self) -> None:
        """Remove every key."""
        for key in self.keys():
            self.delete(key)

    def size_of(self, key: str) -> int:
        """Size in bytes of the UTF-8 encoded value under ``key``."""
        value = self.read(key)
        return len(value.encode("utf-8")) if value is not None else 0

    def total_size(self) -> int:
        return sum(self.size_of(key) for key in self.keys())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.read(key) is not None
