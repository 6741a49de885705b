"""In-process storage backend."""
from __future__ import annotations

from notevc.backends.base import StorageBackend
from notevc.errors import StorageCapacityError


class InMemoryBackend(StorageBackend):
    """Dictionary-backed store with an optional byte capacity.

    Parameters
    ----------
    capacity_bytes:
        When set, a write that would push the total stored size past
        this many bytes raises ``StorageCapacityError`` and leaves the
        previous value in place.
    """

    def __init__(self, capacity_bytes: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._capacity = capacity_bytes

    @property
    def capacity_bytes(self) -> int | None:
        return self._capacity

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        if self._capacity is not None:
            required = self.total_size() - self.size_of(key) + len(value.encode("utf-8"))
            if required > self._capacity:
                raise StorageCapacityError(key, required, self._capacity)
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def __repr__(self) -> str:
        return f"InMemoryBackend(keys={len(self._data)}, capacity_bytes={self._capacity})"
