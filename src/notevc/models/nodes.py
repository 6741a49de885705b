"""Core data types for notevc.

Snapshots (``NoteVersion``) are frozen dataclasses so that a recorded
history can never be edited in place; the only way to change history is
to add a new snapshot or delete existing ones through the
``VersionStore``.

``Document`` is the mutable, editable side of the system.  The library
consumes it only through the small ``DocumentAccessor`` protocol so that
applications can plug in their own note objects.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ChangeType(Enum):
    """How a snapshot came to be recorded."""

    AUTO = "auto"
    MANUAL = "manual"
    RESTORE = "restore"


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DiffStats:
    """Line-level change counts relative to the preceding snapshot.

    Parameters
    ----------
    added_lines:
        Lines present only in the newer content.
    removed_lines:
        Lines present only in the older content.
    changed_chars:
        Character mismatches across lines paired as modified.
    """

    added_lines: int = 0
    removed_lines: int = 0
    changed_chars: int = 0

    @classmethod
    def zero(cls) -> "DiffStats":
        return cls(0, 0, 0)

    @property
    def is_empty(self) -> bool:
        return not (self.added_lines or self.removed_lines or self.changed_chars)


@dataclass(frozen=True, slots=True)
class NoteVersion:
    """An immutable snapshot of a document's title and content.

    Parameters
    ----------
    id:
        Opaque unique identifier of the snapshot.
    document_id:
        Identifier of the owning document.
    version:
        Per-document version number, starting at 1.
    title:
        Document title at the time the snapshot was taken.
    content:
        Document content at the time the snapshot was taken.
    created_at:
        Creation time as epoch seconds.
    change_type:
        Whether the snapshot was an auto-save, manual save or restore.
    change_description:
        Human-readable summary such as ``"Added 3 lines"``.
    diff_stats:
        Changes relative to the previous snapshot; ``None`` for the first.
    """

    id: str
    document_id: str
    version: int
    title: str
    content: str
    created_at: float
    change_type: ChangeType = ChangeType.AUTO
    change_description: str = ""
    diff_stats: DiffStats | None = None

    def __str__(self) -> str:
        return f"v{self.version} [{self.change_type.value}] {self.change_description}"


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


@runtime_checkable
class DocumentAccessor(Protocol):
    """What the version-control core needs from an editable document."""

    @property
    def id(self) -> str: ...

    @property
    def title(self) -> str: ...

    @property
    def content(self) -> str: ...

    @property
    def version(self) -> int: ...

    def update(
        self,
        *,
        content: str | None = None,
        title: str | None = None,
        version: int | None = None,
        now: float,
    ) -> None: ...


DocumentListener = Callable[["Document"], None]


@dataclass(eq=False)
class Document:
    """A simple in-memory editable document.

    Content or title changes made through :meth:`update` are reported to
    subscribed listeners synchronously, which is how the service learns
    that an auto-save should be (re)scheduled.

    Parameters
    ----------
    id:
        Stable identifier of the document.
    title:
        Current title.
    content:
        Current text content.
    version:
        Version number of the snapshot the content corresponds to
        (``0`` when nothing has been saved yet).
    created_at:
        Creation time as epoch seconds.
    updated_at:
        Last-modified time as epoch seconds.
    """

    id: str
    title: str
    content: str
    version: int = 0
    created_at: float = 0.0
    updated_at: float = 0.0
    _listeners: list[DocumentListener] = field(default_factory=list, repr=False)

    def update(
        self,
        *,
        content: str | None = None,
        title: str | None = None,
        version: int | None = None,
        now: float,
    ) -> None:
        """Apply a partial update and stamp ``updated_at`` with ``now``."""
        text_changed = False
        if content is not None and content != self.content:
            self.content = content
            text_changed = True
        if title is not None and title != self.title:
            self.title = title
            text_changed = True
        if version is not None:
            self.version = version
        self.updated_at = now
        if text_changed:
            for listener in list(self._listeners):
                listener(self)

    def subscribe(self, listener: DocumentListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: DocumentListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)


# ---------------------------------------------------------------------------
# Reporting types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QuotaStatus:
    """Aggregate storage health across every document history.

    Parameters
    ----------
    is_healthy:
        ``True`` while usage is below the warning threshold.
    usage_fraction:
        Total serialized size divided by the configured maximum.
    needs_cleanup:
        ``True`` once usage exceeds the warning threshold.
    total_size:
        Total serialized size in bytes.
    document_count:
        Number of documents with a stored history.
    version_count:
        Number of snapshots across all histories.
    """

    is_healthy: bool
    usage_fraction: float
    needs_cleanup: bool
    total_size: int = 0
    document_count: int = 0
    version_count: int = 0


@dataclass(frozen=True)
class VersionControlState:
    """A document's history plus the version pointers derived from it."""

    versions: tuple[NoteVersion, ...]
    current_version: int
    last_saved_version: int


@dataclass(frozen=True)
class VersionComparison:
    """Two snapshots looked up by number and the diff between them.

    Either snapshot is ``None`` when it does not exist, in which case
    ``diff_stats`` is all zeros.
    """

    old: NoteVersion | None
    new: NoteVersion | None
    diff_stats: DiffStats
