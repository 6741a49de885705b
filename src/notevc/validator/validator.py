"""Validator for documents entering the version store and snapshots
loaded back out of a backend.

Usage
-----
::

    from notevc.validator import Validator

    validator = Validator(max_content_size=1024 * 1024)
    issues = validator.validate_document(doc)
    if issues:
        ...
"""
from __future__ import annotations

from notevc.models.nodes import DocumentAccessor, NoteVersion
from notevc.validator.issues import ValidationIssue
from notevc.validator.rules import (
    DOCUMENT_RULES,
    SNAPSHOT_RULES,
    DocumentRule,
    SnapshotRule,
)


class Validator:
    """Runs the document and snapshot rule sets.

    Parameters
    ----------
    max_content_size:
        Largest content length, in characters, that passes validation.
    document_rules:
        Rules applied to documents.  Defaults to ``DOCUMENT_RULES``.
    snapshot_rules:
        Rules applied to snapshots.  Defaults to ``SNAPSHOT_RULES``.
    """

    def __init__(
        self,
        max_content_size: int,
        document_rules: list[DocumentRule] | None = None,
        snapshot_rules: list[SnapshotRule] | None = None,
    ) -> None:
        self._max_content_size = max_content_size
        self._document_rules = (
            document_rules if document_rules is not None else list(DOCUMENT_RULES)
        )
        self._snapshot_rules = (
            snapshot_rules if snapshot_rules is not None else list(SNAPSHOT_RULES)
        )

    def validate_document(self, document: DocumentAccessor) -> list[ValidationIssue]:
        """Return every issue found in ``document``; empty when valid."""
        issues: list[ValidationIssue] = []
        for rule in self._document_rules:
            issues.extend(rule(document, self._max_content_size))
        return issues

    def validate_snapshot(self, snapshot: NoteVersion) -> list[ValidationIssue]:
        """Return every issue found in ``snapshot``; empty when valid."""
        issues: list[ValidationIssue] = []
        for rule in self._snapshot_rules:
            issues.extend(rule(snapshot, self._max_content_size))
        return issues

    def is_valid_snapshot(self, snapshot: NoteVersion) -> bool:
        return not self.validate_snapshot(snapshot)
