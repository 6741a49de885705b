"""Data model for notevc: snapshots, documents, and their serializer."""
from __future__ import annotations

from notevc.models.nodes import (
    ChangeType,
    DiffStats,
    Document,
    DocumentAccessor,
    NoteVersion,
    QuotaStatus,
    VersionComparison,
    VersionControlState,
)
from notevc.models.serializer import SnapshotSerializer

__all__ = [
    "ChangeType",
    "DiffStats",
    "Document",
    "DocumentAccessor",
    "NoteVersion",
    "QuotaStatus",
    "SnapshotSerializer",
    "VersionComparison",
    "VersionControlState",
]
