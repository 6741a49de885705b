"""Issue type reported by the notevc validator.

A ``ValidationIssue`` names the offending field and the rule that
rejected it, so a caller can tell an oversized document apart from one
that simply has no title.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation finding.

    Parameters
    ----------
    code:
        A short machine-readable identifier, e.g. ``"NVC003"``.
    field:
        The document or snapshot field at fault.
    message:
        Human-readable description of the problem.
    """

    code: str
    field: str
    message: str

    def __str__(self) -> str:
        return f"[{self.code}] {self.field}: {self.message}"
