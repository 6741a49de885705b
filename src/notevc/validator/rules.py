"""Validation rules for documents and snapshots.

Each rule is a callable that accepts the object under test plus the
content size limit and returns a list of ``ValidationIssue`` objects.

Rule codes:

    NVC001  Missing document/snapshot identifier
    NVC002  Missing title
    NVC003  Missing content
    NVC004  Content exceeds the size limit
    NVC005  Snapshot is not attached to a document
    NVC006  Snapshot version number is not positive
    NVC007  Snapshot has no creation timestamp
"""
from __future__ import annotations

from typing import Any, Callable

from notevc.models.nodes import DocumentAccessor, NoteVersion
from notevc.validator.issues import ValidationIssue

DocumentRule = Callable[[DocumentAccessor, int], list[ValidationIssue]]
SnapshotRule = Callable[[NoteVersion, int], list[ValidationIssue]]


def _missing(value: Any) -> bool:
    return not isinstance(value, str) or not value


def rule_identifier(obj: Any, max_size: int) -> list[ValidationIssue]:
    """NVC001: the object must carry a non-empty identifier."""
    if _missing(getattr(obj, "id", None)):
        return [ValidationIssue("NVC001", "id", "identifier must be a non-empty string")]
    return []


def rule_title(obj: Any, max_size: int) -> list[ValidationIssue]:
    """NVC002: a title is required."""
    if _missing(getattr(obj, "title", None)):
        return [ValidationIssue("NVC002", "title", "title must be a non-empty string")]
    return []


def rule_content(obj: Any, max_size: int) -> list[ValidationIssue]:
    """NVC003/NVC004: content must be present and within the size limit."""
    content = getattr(obj, "content", None)
    if _missing(content):
        return [ValidationIssue("NVC003", "content", "content must be a non-empty string")]
    if len(content) > max_size:
        return [
            ValidationIssue(
                "NVC004",
                "content",
                f"content is {len(content)} characters, limit is {max_size}",
            )
        ]
    return []


def rule_snapshot_owner(snapshot: NoteVersion, max_size: int) -> list[ValidationIssue]:
    """NVC005: snapshots must name the document they belong to."""
    if _missing(snapshot.document_id):
        return [ValidationIssue("NVC005", "document_id", "snapshot has no owning document")]
    return []


def rule_snapshot_version(snapshot: NoteVersion, max_size: int) -> list[ValidationIssue]:
    """NVC006: version numbers start at 1."""
    if snapshot.version < 1:
        return [
            ValidationIssue(
                "NVC006", "version", f"version must be positive, got {snapshot.version}"
            )
        ]
    return []


def rule_snapshot_timestamp(snapshot: NoteVersion, max_size: int) -> list[ValidationIssue]:
    """NVC007: a snapshot without a creation time cannot be ordered by age."""
    if not snapshot.created_at:
        return [ValidationIssue("NVC007", "created_at", "snapshot has no creation time")]
    return []


DOCUMENT_RULES: list[DocumentRule] = [rule_identifier, rule_title, rule_content]

SNAPSHOT_RULES: list[SnapshotRule] = [
    rule_identifier,
    rule_snapshot_owner,
    rule_snapshot_version,
    rule_title,
    rule_content,
    rule_snapshot_timestamp,
]
