"""Directory-backed storage backend.

Each document history lives in its own ``<quoted id>.json`` file.
Writes go to a temporary file in the same directory that is then moved
over the target with ``os.replace``, which is atomic on POSIX and
Windows.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from urllib.parse import quote, unquote

from notevc.backends.base import StorageBackend
from notevc.errors import CorruptHistory, StorageCapacityError

logger = logging.getLogger(__name__)

_SUFFIX = ".json"


class FileBackend(StorageBackend):
    """Store histories as JSON files under ``directory``.

    Parameters
    ----------
    directory:
        Folder holding one file per document.  Created when missing.
    capacity_bytes:
        Optional limit on the summed size of all history files.
    """

    def __init__(self, directory: str | Path, capacity_bytes: int | None = None) -> None:
        self._directory = Path(directory)
        self._directory.mkdir(parents=True, exist_ok=True)
        self._capacity = capacity_bytes

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        return self._directory / f"{quote(key, safe='')}{_SUFFIX}"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise CorruptHistory(key, f"not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc

    def write(self, key: str, value: str) -> None:
        encoded = value.encode("utf-8")
        if self._capacity is not None:
            required = self.total_size() - self.size_of(key) + len(encoded)
            if required > self._capacity:
                raise StorageCapacityError(key, required, self._capacity)

        fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=".tmp-", suffix=_SUFFIX)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(encoded)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d bytes for %r to %s", len(encoded), key, self._directory)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        return sorted(
            unquote(path.name[: -len(_SUFFIX)])
            for path in self._directory.glob(f"*{_SUFFIX}")
            if not path.name.startswith(".tmp-")
        )

    def size_of(self, key: str) -> int:
        try:
            return self._path(key).stat().st_size
        except FileNotFoundError:
            return 0

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._path(key).is_file()

    def __repr__(self) -> str:
        return f"FileBackend(directory={str(self._directory)!r}, capacity_bytes={self._capacity})"
