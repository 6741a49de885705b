"""Serialization of snapshot histories for notevc.

A document's history is persisted as a JSON array of flat snapshot
records.  The same plain dict/list structure maps onto YAML for
human-readable exports.

Usage
-----
::

    from notevc.models.serializer import SnapshotSerializer

    serializer = SnapshotSerializer()
    text = serializer.to_json(versions)
    records = serializer.load_records(text)
    snapshot = serializer.from_dict(records[0])
"""
from __future__ import annotations

import json
from collections.abc import Iterable

import yaml

from notevc.models.nodes import ChangeType, DiffStats, NoteVersion

_REQUIRED_FIELDS: tuple[str, ...] = (
    "id",
    "document_id",
    "version",
    "title",
    "content",
    "created_at",
)


class SnapshotSerializer:
    """Converts between ``NoteVersion`` objects and plain Python dicts.

    Deserialization is strict about structure: a record missing a
    required field, or carrying a field of the wrong type, raises
    ``ValueError`` so that callers can discard it individually.
    """

    # ------------------------------------------------------------------
    # Serialization (snapshot → dict)
    # ------------------------------------------------------------------

    def to_dict(self, snapshot: NoteVersion) -> dict[str, object]:
        """Serialize a ``NoteVersion`` to a JSON-compatible dict."""
        return {
            "id": snapshot.id,
            "document_id": snapshot.document_id,
            "version": snapshot.version,
            "title": snapshot.title,
            "content": snapshot.content,
            "created_at": snapshot.created_at,
            "change_type": snapshot.change_type.value,
            "change_description": snapshot.change_description,
            "diff_stats": self._stats_to_dict(snapshot.diff_stats),
        }

    def _stats_to_dict(self, stats: DiffStats | None) -> dict[str, int] | None:
        if stats is None:
            return None
        return {
            "added_lines": stats.added_lines,
            "removed_lines": stats.removed_lines,
            "changed_chars": stats.changed_chars,
        }

    # ------------------------------------------------------------------
    # Deserialization (dict → snapshot)
    # ------------------------------------------------------------------

    def from_dict(self, data: object) -> NoteVersion:
        """Deserialize a single snapshot record.

        Raises
        ------
        ValueError
            If ``data`` is not a well-formed snapshot record.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Snapshot record must be an object, got {type(data).__name__}")
        missing = [name for name in _REQUIRED_FIELDS if name not in data]
        if missing:
            raise ValueError(f"Snapshot record is missing field(s): {', '.join(missing)}")

        version = data["version"]
        if isinstance(version, bool) or not isinstance(version, int):
            raise ValueError(f"Snapshot version must be an integer, got {version!r}")
        created_at = data["created_at"]
        if isinstance(created_at, bool) or not isinstance(created_at, (int, float)):
            raise ValueError(f"Snapshot created_at must be a number, got {created_at!r}")
        for name in ("id", "document_id", "title", "content"):
            if not isinstance(data[name], str):
                raise ValueError(f"Snapshot field {name!r} must be a string")

        raw_type = data.get("change_type", ChangeType.AUTO.value)
        try:
            change_type = ChangeType(raw_type)
        except ValueError:
            raise ValueError(f"Unknown change type: {raw_type!r}") from None

        description = data.get("change_description") or ""
        if not isinstance(description, str):
            raise ValueError("Snapshot change_description must be a string")

        return NoteVersion(
            id=data["id"],
            document_id=data["document_id"],
            version=version,
            title=data["title"],
            content=data["content"],
            created_at=float(created_at),
            change_type=change_type,
            change_description=description,
            diff_stats=self._stats_from_dict(data.get("diff_stats")),
        )

    def _stats_from_dict(self, data: object) -> DiffStats | None:
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValueError("Snapshot diff_stats must be an object or null")
        try:
            return DiffStats(
                added_lines=int(data.get("added_lines", 0)),
                removed_lines=int(data.get("removed_lines", 0)),
                changed_chars=int(data.get("changed_chars", 0)),
            )
        except (TypeError, ValueError):
            raise ValueError(f"Malformed diff_stats: {data!r}") from None

    # ------------------------------------------------------------------
    # JSON helpers
    # ------------------------------------------------------------------

    def to_json(self, history: Iterable[NoteVersion], indent: int | None = None) -> str:
        """Serialize a history to a JSON array string."""
        return json.dumps(
            [self.to_dict(snapshot) for snapshot in history],
            indent=indent,
            ensure_ascii=False,
        )

    def load_records(self, text: str) -> list[object]:
        """Parse a persisted history into raw records without validating them.

        Raises
        ------
        ValueError
            If ``text`` is not JSON or its top level is not an array.
        """
        data = json.loads(text)
        if not isinstance(data, list):
            raise ValueError("Persisted history must be a JSON array")
        return data

    def from_json(self, text: str) -> list[NoteVersion]:
        """Deserialize a history, raising on the first malformed record."""
        return [self.from_dict(record) for record in self.load_records(text)]

    # ------------------------------------------------------------------
    # YAML helpers
    # ------------------------------------------------------------------

    def to_yaml(self, history: Iterable[NoteVersion]) -> str:
        """Serialize a history to a YAML string."""
        return yaml.dump(
            [self.to_dict(snapshot) for snapshot in history],
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )

    def from_yaml(self, text: str) -> list[NoteVersion]:
        """Deserialize a history from a YAML string."""
        data = yaml.safe_load(text) or []
        if not isinstance(data, list):
            raise ValueError("YAML history must be a sequence")
        return [self.from_dict(record) for record in data]
