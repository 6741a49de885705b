"""notevc diff module.

Exports the positional line matcher, the stats/description helpers and
the higher-level ``Differ`` and ``DiffResult`` from the ``differ``
submodule.
"""
from __future__ import annotations

from notevc.diff.diff import (
    LineChange,
    LineChangeKind,
    compute_changes,
    count_changed_chars,
    describe,
    diff,
    line_diff,
    pair_modified,
    split_lines,
    stats_from_changes,
)
from notevc.diff.differ import Differ, DiffResult

__all__ = [
    "DiffResult",
    "Differ",
    "LineChange",
    "LineChangeKind",
    "compute_changes",
    "count_changed_chars",
    "describe",
    "diff",
    "line_diff",
    "pair_modified",
    "split_lines",
    "stats_from_changes",
]
