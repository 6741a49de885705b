"""Structured comparison of two document contents.

``Differ`` wraps the functions in :mod:`notevc.diff.diff` and returns a
:class:`DiffResult` that keeps the paired change list next to the
aggregated stats and description.

Usage
-----
::

    from notevc.diff.differ import Differ

    result = Differ().compare(old_text, new_text)
    print(result.summary())
    for change in result.changes:
        print(change)
"""
from __future__ import annotations

from dataclasses import dataclass, field

from notevc.diff.diff import (
    LineChange,
    LineChangeKind,
    compute_changes,
    describe,
    stats_from_changes,
)
from notevc.models.nodes import DiffStats


@dataclass
class DiffResult:
    """Result of comparing two contents.

    Parameters
    ----------
    stats:
        Aggregated line/character counts.
    description:
        Human-readable summary, as stored on snapshots.
    changes:
        Every line in walk order, with modified pairs merged.
    """

    stats: DiffStats
    description: str
    changes: list[LineChange] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        """Return ``True`` when any line is not unchanged."""
        return any(c.kind is not LineChangeKind.UNCHANGED for c in self.changes)

    def by_kind(self, kind: LineChangeKind) -> list[LineChange]:
        """Return all changes of a specific :class:`LineChangeKind`."""
        return [change for change in self.changes if change.kind is kind]

    @property
    def modified_count(self) -> int:
        return len(self.by_kind(LineChangeKind.MODIFIED))

    def summary(self) -> str:
        """Return a multi-line human-readable summary of the diff."""
        if not self.has_changes:
            return "No changes."
        lines = [
            self.description,
            f"  +{self.stats.added_lines} -{self.stats.removed_lines} "
            f"~{self.modified_count} line(s), {self.stats.changed_chars} character(s) changed",
            "",
        ]
        for change in self.changes:
            if change.kind is not LineChangeKind.UNCHANGED:
                lines.append(f"  {change}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        """Serialise the result to a plain dictionary for JSON output."""
        return {
            "added_lines": self.stats.added_lines,
            "removed_lines": self.stats.removed_lines,
            "changed_chars": self.stats.changed_chars,
            "description": self.description,
            "changes": [
                {
                    "kind": change.kind.name,
                    "old_line": change.old_line,
                    "new_line": change.new_line,
                    "old_index": change.old_index,
                    "new_index": change.new_index,
                }
                for change in self.changes
            ],
        }


class Differ:
    """Line-level differ producing :class:`DiffResult` objects."""

    def compare(self, old: str, new: str) -> DiffResult:
        """Compare ``old`` against ``new``.

        Parameters
        ----------
        old:
            The baseline content.
        new:
            The updated content.
        """
        changes = compute_changes(old, new)
        stats = stats_from_changes(changes)
        return DiffResult(stats=stats, description=describe(stats), changes=changes)
