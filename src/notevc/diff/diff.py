"""Line-level diff between two document contents.

The matcher is deliberately *not* a longest-common-subsequence diff.
Lines are matched by value: the i-th occurrence of a line in the old
content is paired with the i-th occurrence of the same line in the new
content, then both sides are walked in lockstep.  Stored ``DiffStats``
and change descriptions are defined against this exact behavior, so it
must not be swapped for an edit-distance-optimal algorithm.  With
repeated identical lines the result can classify more lines as
added/removed than a minimal diff would.

After the lockstep walk, removed and added lines inside the same
contiguous change run are paired by rank and reported as *modified*
lines whose character mismatches feed ``changed_chars``.

Usage
-----
::

    from notevc.diff import diff, describe

    stats = diff("Hello", "Hello world")
    stats.changed_chars      # 6
    describe(stats)          # 'Changed 6 characters'
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from notevc.models.nodes import DiffStats


class LineChangeKind(Enum):
    """Classification of a single line in a line diff."""

    UNCHANGED = auto()
    ADDED = auto()
    REMOVED = auto()
    MODIFIED = auto()


@dataclass(frozen=True)
class LineChange:
    """One entry of a line diff.

    Parameters
    ----------
    kind:
        How the line changed.
    old_line:
        The line on the old side (``None`` for additions).
    new_line:
        The line on the new side (``None`` for removals).
    old_index:
        0-based index into the old lines, when there is an old side.
    new_index:
        0-based index into the new lines, when there is a new side.
    """

    kind: LineChangeKind
    old_line: str | None = None
    new_line: str | None = None
    old_index: int | None = None
    new_index: int | None = None

    def __str__(self) -> str:
        if self.kind is LineChangeKind.ADDED:
            return f"[+] {self.new_line}"
        if self.kind is LineChangeKind.REMOVED:
            return f"[-] {self.old_line}"
        if self.kind is LineChangeKind.MODIFIED:
            return f"[~] {self.old_line!r} → {self.new_line!r}"
        return f"    {self.old_line}"


# ---------------------------------------------------------------------------
# Line splitting
# ---------------------------------------------------------------------------


def split_lines(content: str) -> list[str]:
    """Split ``content`` on ``\\n`` and drop trailing blank lines."""
    lines = content.split("\n")
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


# ---------------------------------------------------------------------------
# Positional matching
# ---------------------------------------------------------------------------


def _positions(lines: list[str]) -> dict[str, list[int]]:
    positions: dict[str, list[int]] = {}
    for index, line in enumerate(lines):
        positions.setdefault(line, []).append(index)
    return positions


def line_diff(old_lines: list[str], new_lines: list[str]) -> list[LineChange]:
    """Classify every line as unchanged, added or removed.

    Parameters
    ----------
    old_lines:
        Lines of the baseline content.
    new_lines:
        Lines of the updated content.

    Returns
    -------
    list[LineChange]
        Entries in walk order.  No entry is ``MODIFIED``; see
        :func:`pair_modified`.
    """
    old_positions = _positions(old_lines)
    new_positions = _positions(new_lines)

    matches: list[tuple[int, int]] = []
    used_old: set[int] = set()
    used_new: set[int] = set()

    for line, old_indices in old_positions.items():
        new_indices = new_positions.get(line)
        if new_indices is None:
            continue
        for old_index, new_index in zip(old_indices, new_indices):
            if old_index in used_old or new_index in used_new:
                continue
            matches.append((old_index, new_index))
            used_old.add(old_index)
            used_new.add(new_index)

    matches.sort(key=lambda pair: pair[0])

    result: list[LineChange] = []
    old_index = new_index = match_index = 0
    while old_index < len(old_lines) or new_index < len(new_lines):
        if match_index < len(matches) and matches[match_index] == (old_index, new_index):
            result.append(
                LineChange(
                    LineChangeKind.UNCHANGED,
                    old_line=old_lines[old_index],
                    new_line=new_lines[new_index],
                    old_index=old_index,
                    new_index=new_index,
                )
            )
            old_index += 1
            new_index += 1
            match_index += 1
        elif new_index < len(new_lines) and new_index not in used_new:
            result.append(
                LineChange(
                    LineChangeKind.ADDED,
                    new_line=new_lines[new_index],
                    new_index=new_index,
                )
            )
            new_index += 1
        elif old_index < len(old_lines) and old_index not in used_old:
            result.append(
                LineChange(
                    LineChangeKind.REMOVED,
                    old_line=old_lines[old_index],
                    old_index=old_index,
                )
            )
            old_index += 1
        else:
            # Both cursors sit on lines matched elsewhere
            old_index += 1
            new_index += 1

    return result


# ---------------------------------------------------------------------------
# Modified-line pairing
# ---------------------------------------------------------------------------


def _pair_run(run: list[LineChange]) -> list[LineChange]:
    removed = [c for c in run if c.kind is LineChangeKind.REMOVED]
    added = [c for c in run if c.kind is LineChangeKind.ADDED]
    pair_count = min(len(removed), len(added))
    rank_of: dict[int, int] = {}
    for rank, change in enumerate(removed[:pair_count]):
        rank_of[id(change)] = rank
    for rank, change in enumerate(added[:pair_count]):
        rank_of[id(change)] = rank

    paired: list[LineChange] = []
    emitted: set[int] = set()
    for change in run:
        rank = rank_of.get(id(change))
        if rank is None:
            paired.append(change)
            continue
        if rank in emitted:
            continue
        emitted.add(rank)
        old, new = removed[rank], added[rank]
        paired.append(
            LineChange(
                LineChangeKind.MODIFIED,
                old_line=old.old_line,
                new_line=new.new_line,
                old_index=old.old_index,
                new_index=new.new_index,
            )
        )
    return paired


def pair_modified(changes: list[LineChange]) -> list[LineChange]:
    """Turn rank-matched removed/added lines in each change run into MODIFIED.

    A change run is a maximal sequence of entries that are not
    ``UNCHANGED``.  Inside a run the k-th removed line pairs with the
    k-th added line; the pair is emitted where its first member stood.
    Unpaired lines keep their original classification.
    """
    result: list[LineChange] = []
    run: list[LineChange] = []
    for change in changes:
        if change.kind is LineChangeKind.UNCHANGED:
            if run:
                result.extend(_pair_run(run))
                run = []
            result.append(change)
        else:
            run.append(change)
    if run:
        result.extend(_pair_run(run))
    return result


def count_changed_chars(old_line: str, new_line: str) -> int:
    """Count index-wise character mismatches up to the longer line's length."""
    longest = max(len(old_line), len(new_line))
    changed = 0
    for index in range(longest):
        old_char = old_line[index] if index < len(old_line) else None
        new_char = new_line[index] if index < len(new_line) else None
        if old_char != new_char:
            changed += 1
    return changed


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def compute_changes(old: str, new: str) -> list[LineChange]:
    """Full change list between two contents, with modified pairs."""
    return pair_modified(line_diff(split_lines(old), split_lines(new)))


def stats_from_changes(changes: list[LineChange]) -> DiffStats:
    """Aggregate a paired change list into ``DiffStats``."""
    added = removed = changed_chars = 0
    for change in changes:
        if change.kind is LineChangeKind.ADDED:
            added += 1
        elif change.kind is LineChangeKind.REMOVED:
            removed += 1
        elif change.kind is LineChangeKind.MODIFIED:
            changed_chars += count_changed_chars(change.old_line or "", change.new_line or "")
    return DiffStats(added_lines=added, removed_lines=removed, changed_chars=changed_chars)


def diff(old: str, new: str) -> DiffStats:
    """Compute ``DiffStats`` from ``old`` to ``new``.

    ``diff(x, x)`` is always all zeros.
    """
    return stats_from_changes(compute_changes(old, new))


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count > 1 else ''}"


def describe(stats: DiffStats) -> str:
    """Produce the human-readable change summary stored on a snapshot."""
    if stats.added_lines > 0 and stats.removed_lines == 0:
        return f"Added {_plural(stats.added_lines, 'line')}"
    if stats.removed_lines > 0 and stats.added_lines == 0:
        return f"Removed {_plural(stats.removed_lines, 'line')}"
    if stats.added_lines > 0 and stats.removed_lines > 0:
        return f"Modified {_plural(stats.added_lines + stats.removed_lines, 'line')}"
    if stats.changed_chars > 0:
        return f"Changed {_plural(stats.changed_chars, 'character')}"
    return "Minor changes"
