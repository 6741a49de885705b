"""Meaningful-change detection for notevc.

Two contents differ "meaningfully" when they still differ after
whitespace noise has been normalized away.  The detector is used both to
suppress redundant snapshots and to tell an editor whether it has
unsaved work.

Usage
-----
::

    from notevc.detect import ChangeDetector

    detector = ChangeDetector()
    detector.has_meaningful_changes("a\\n", "a   \\n\\n")   # False
    detector.has_meaningful_changes("a", "b")             # True
"""
from __future__ import annotations

from dataclasses import dataclass

from notevc.config import NormalizationConfig


@dataclass(frozen=True)
class IgnoredChanges:
    """Which normalization rules hid a difference between two contents."""

    ignored_trailing_whitespace: bool = False
    ignored_empty_lines: bool = False
    ignored_whitespace_only_lines: bool = False

    @property
    def has_ignored_changes(self) -> bool:
        return (
            self.ignored_trailing_whitespace
            or self.ignored_empty_lines
            or self.ignored_whitespace_only_lines
        )


@dataclass(frozen=True)
class MeaningfulCheck:
    """Result of :meth:`ChangeDetector.check`."""

    has_meaningful_changes: bool
    ignored_changes: IgnoredChanges


class ChangeDetector:
    """Compares contents modulo configurable whitespace normalization.

    Parameters
    ----------
    config:
        Normalization switches.  All rules are on by default.
    """

    def __init__(self, config: NormalizationConfig | None = None) -> None:
        self._config = config or NormalizationConfig()

    @property
    def config(self) -> NormalizationConfig:
        return self._config

    def normalize(self, content: str) -> str:
        """Return ``content`` with the configured whitespace noise removed."""
        lines = content.split("\n")
        if self._config.ignore_trailing_whitespace:
            lines = [line.rstrip() for line in lines]
        if self._config.ignore_leading_whitespace:
            lines = [line.lstrip() for line in lines]
        if self._config.ignore_empty_lines:
            while lines and not lines[-1].strip():
                lines.pop()
        if self._config.ignore_whitespace_only_lines:
            lines = [line for line in lines if line.strip()]
        return "\n".join(lines)

    def has_meaningful_changes(self, old: str, new: str) -> bool:
        """Return ``True`` iff ``old`` and ``new`` differ after normalization."""
        return self.normalize(old) != self.normalize(new)

    def ignored_changes(self, old: str, new: str) -> IgnoredChanges:
        """Report which enabled rules actually altered either content."""
        old_lines = old.split("\n")
        new_lines = new.split("\n")

        trailing = False
        if self._config.ignore_trailing_whitespace:
            trailing = (
                old != "\n".join(line.rstrip() for line in old_lines)
                or new != "\n".join(line.rstrip() for line in new_lines)
            )

        empty = False
        if self._config.ignore_empty_lines:
            empty = old != old.rstrip("\n") or new != new.rstrip("\n")

        whitespace_only = False
        if self._config.ignore_whitespace_only_lines:
            whitespace_only = (
                old != "\n".join(line for line in old_lines if line.strip())
                or new != "\n".join(line for line in new_lines if line.strip())
            )

        return IgnoredChanges(
            ignored_trailing_whitespace=trailing,
            ignored_empty_lines=empty,
            ignored_whitespace_only_lines=whitespace_only,
        )

    def check(self, old: str, new: str) -> MeaningfulCheck:
        """Combine :meth:`has_meaningful_changes` and :meth:`ignored_changes`."""
        return MeaningfulCheck(
            has_meaningful_changes=self.has_meaningful_changes(old, new),
            ignored_changes=self.ignored_changes(old, new),
        )


def has_meaningful_changes(old: str, new: str) -> bool:
    """Convenience function using the default normalization rules."""
    return ChangeDetector().has_meaningful_changes(old, new)
