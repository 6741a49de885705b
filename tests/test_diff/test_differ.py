"""Tests for notevc.diff.differ — Differ and DiffResult."""
from __future__ import annotations

import json

from notevc.diff import Differ, DiffResult, LineChangeKind
from notevc.models import DiffStats


class TestDiffer:
    def setup_method(self) -> None:
        self.differ = Differ()

    def test_returns_diff_result(self) -> None:
        assert isinstance(self.differ.compare("a", "b"), DiffResult)

    def test_stats_and_description(self) -> None:
        result = self.differ.compare("Hello", "Hello world")
        assert result.stats == DiffStats(0, 0, 6)
        assert result.description == "Changed 6 characters"

    def test_identical_has_no_changes(self) -> None:
        result = self.differ.compare("same\ntext", "same\ntext")
        assert not result.has_changes
        assert result.summary() == "No changes."
        assert result.description == "Minor changes"

    def test_by_kind(self) -> None:
        result = self.differ.compare("a\nb", "a\nb\nc\nd")
        added = result.by_kind(LineChangeKind.ADDED)
        assert [change.new_line for change in added] == ["c", "d"]
        assert result.by_kind(LineChangeKind.REMOVED) == []

    def test_modified_count(self) -> None:
        result = self.differ.compare("a\nb", "c\nd\ne")
        assert result.modified_count == 2

    def test_summary_lists_changed_lines_only(self) -> None:
        result = self.differ.compare("keep\nold", "keep\nnew")
        summary = result.summary()
        assert summary.splitlines()[0] == result.description
        assert "[~] 'old' → 'new'" in summary
        assert "keep" not in summary

    def test_to_dict_is_json_serializable(self) -> None:
        result = self.differ.compare("a", "a\nb")
        data = result.to_dict()
        assert data["added_lines"] == 1
        assert data["description"] == "Added 1 line"
        kinds = [entry["kind"] for entry in data["changes"]]  # type: ignore[union-attr]
        assert kinds == ["UNCHANGED", "ADDED"]
        json.dumps(data)
