"""notevc — per-document version control and line diffing for editable notes.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import notevc
    from notevc.models import Document

    # Line-level stats between two contents
    stats = notevc.diff("Hello", "Hello world")
    notevc.describe(stats)            # 'Changed 6 characters'

    # Whitespace-insensitive comparison
    notevc.has_meaningful_changes("a  \\n", "a")   # False

    # Full service with auto-save, restore and quota handling
    service = notevc.VersionControlService.create()
    doc = Document(id="n1", title="Notes", content="Hello")
    service.create_manual_version(doc)

    notevc.__version__
    '0.1.0'
"""
from __future__ import annotations

from typing import TYPE_CHECKING

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from notevc.models.nodes import DiffStats

from notevc.service import VersionControlService


def diff(old: str, new: str) -> "DiffStats":
    """Compute line-level ``DiffStats`` from ``old`` to ``new``.

    Parameters
    ----------
    old:
        The baseline content.
    new:
        The updated content.

    Returns
    -------
    DiffStats
        Added lines, removed lines and changed characters.
    """
    from notevc.diff.diff import diff as _diff

    return _diff(old, new)


def describe(stats: "DiffStats") -> str:
    """Summarise ``stats`` the way snapshot descriptions are generated."""
    from notevc.diff.diff import describe as _describe

    return _describe(stats)


def has_meaningful_changes(old: str, new: str) -> bool:
    """Return ``True`` if ``old`` and ``new`` differ beyond whitespace noise.

    Uses the default normalization rules; build a
    :class:`~notevc.detect.ChangeDetector` for custom ones.
    """
    from notevc.detect.detector import has_meaningful_changes as _check

    return _check(old, new)


__all__ = [
    "__version__",
    "VersionControlService",
    "describe",
    "diff",
    "has_meaningful_changes",
]
