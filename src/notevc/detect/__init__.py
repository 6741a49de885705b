"""Whitespace-insensitive change detection."""
from __future__ import annotations

from notevc.detect.detector import (
    ChangeDetector,
    IgnoredChanges,
    MeaningfulCheck,
    has_meaningful_changes,
)

__all__ = [
    "ChangeDetector",
    "IgnoredChanges",
    "MeaningfulCheck",
    "has_meaningful_changes",
]
