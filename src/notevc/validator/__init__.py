"""Validation of documents and snapshots."""
from __future__ import annotations

from notevc.validator.issues import ValidationIssue
from notevc.validator.rules import DOCUMENT_RULES, SNAPSHOT_RULES
from notevc.validator.validator import Validator

__all__ = [
    "DOCUMENT_RULES",
    "SNAPSHOT_RULES",
    "ValidationIssue",
    "Validator",
]
