"""Tests for notevc.cli.main — commands exercised through click's CliRunner
against a file-backed store in a temporary directory.
"""
from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from notevc.cli.main import cli


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def store_dir(tmp_path: Path) -> str:
    return str(tmp_path / "store")


def _write(path: Path, text: str) -> str:
    path.write_text(text, encoding="utf-8")
    return str(path)


def _invoke(runner: CliRunner, store_dir: str, *args: str):
    return runner.invoke(cli, ["--store", store_dir, *args])


def _history(runner: CliRunner, store_dir: str, document_id: str = "n1") -> list[dict]:
    result = _invoke(runner, store_dir, "history", document_id, "--format", "json")
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


@pytest.fixture()
def two_versions(runner: CliRunner, store_dir: str, tmp_path: Path) -> Path:
    note = tmp_path / "note.md"
    _write(note, "Hello")
    assert _invoke(runner, store_dir, "save", str(note), "--id", "n1").exit_code == 0
    _write(note, "Hello world")
    assert _invoke(runner, store_dir, "save", str(note), "--id", "n1").exit_code == 0
    return note


class TestInfoCommands:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "notevc" in result.output

    def test_backends(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["backends"])
        assert result.exit_code == 0
        assert "memory" in result.output
        assert "file" in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("diff", "save", "history", "restore", "quota"):
            assert command in result.output


class TestDiffCommand:
    def test_character_change(self, runner: CliRunner, tmp_path: Path) -> None:
        old = _write(tmp_path / "old.txt", "Hello")
        new = _write(tmp_path / "new.txt", "Hello world")
        result = runner.invoke(cli, ["diff", old, new])
        assert result.exit_code == 0
        assert "Changed 6 characters" in result.output

    def test_json_output(self, runner: CliRunner, tmp_path: Path) -> None:
        old = _write(tmp_path / "old.txt", "a\nb")
        new = _write(tmp_path / "new.txt", "a\nb\nc")
        result = runner.invoke(cli, ["diff", old, new, "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["added_lines"] == 1
        assert data["description"] == "Added 1 line"

    def test_trailing_blank_lines_are_not_changes(self, runner: CliRunner, tmp_path: Path) -> None:
        old = _write(tmp_path / "old.txt", "same")
        new = _write(tmp_path / "new.txt", "same\n\n  \n")
        result = runner.invoke(cli, ["diff", old, new])
        assert result.exit_code == 0
        assert "No changes" in result.output

    def test_trailing_spaces_inside_a_line_are_changes(
        self, runner: CliRunner, tmp_path: Path
    ) -> None:
        old = _write(tmp_path / "old.txt", "same")
        new = _write(tmp_path / "new.txt", "same  \n")
        result = runner.invoke(cli, ["diff", old, new])
        assert result.exit_code == 0
        assert "Changed 2 characters" in result.output

    def test_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        new = _write(tmp_path / "new.txt", "x")
        result = runner.invoke(cli, ["diff", str(tmp_path / "absent.txt"), new])
        assert result.exit_code == 1
        assert "Error" in result.output


class TestSaveAndHistory:
    def test_history_newest_first(
        self, runner: CliRunner, store_dir: str, two_versions: Path
    ) -> None:
        history = _history(runner, store_dir)
        assert [record["version"] for record in history] == [2, 1]
        assert history[0]["change_type"] == "manual"
        assert history[0]["diff_stats"]["changed_chars"] == 6

    def test_default_id_and_title(
        self, runner: CliRunner, store_dir: str, tmp_path: Path
    ) -> None:
        note = _write(tmp_path / "ideas.md", "Some ideas")
        result = _invoke(runner, store_dir, "save", note)
        assert result.exit_code == 0
        assert "ideas v1" in result.output
        history = _history(runner, store_dir, "ideas")
        assert history[0]["title"] == "ideas.md"

    def test_description_option(
        self, runner: CliRunner, store_dir: str, tmp_path: Path
    ) -> None:
        note = _write(tmp_path / "note.md", "Draft")
        _invoke(runner, store_dir, "save", note, "--id", "n1", "-m", "First draft")
        assert _history(runner, store_dir)[0]["change_description"] == "First draft"

    def test_unchanged_file_is_not_saved(
        self, runner: CliRunner, store_dir: str, two_versions: Path
    ) -> None:
        result = _invoke(runner, store_dir, "save", str(two_versions), "--id", "n1")
        assert result.exit_code == 0
        assert "No changes to save" in result.output
        assert len(_history(runner, store_dir)) == 2

    def test_empty_file_fails_validation(
        self, runner: CliRunner, store_dir: str, tmp_path: Path
    ) -> None:
        note = _write(tmp_path / "empty.md", "")
        result = _invoke(runner, store_dir, "save", note)
        assert result.exit_code == 1
        assert "Save failed" in result.output

    def test_yaml_history(self, runner: CliRunner, store_dir: str, two_versions: Path) -> None:
        result = _invoke(runner, store_dir, "history", "n1", "--format", "yaml")
        assert result.exit_code == 0
        assert "version: 2" in result.output

    def test_table_history(self, runner: CliRunner, store_dir: str, two_versions: Path) -> None:
        result = _invoke(runner, store_dir, "history", "n1")
        assert result.exit_code == 0
        assert "v2" in result.output
        assert "manual" in result.output

    def test_empty_history(self, runner: CliRunner, store_dir: str) -> None:
        result = _invoke(runner, store_dir, "history", "ghost")
        assert result.exit_code == 0
        assert "No versions" in result.output


class TestShowAndCompare:
    def test_show(self, runner: CliRunner, store_dir: str, two_versions: Path) -> None:
        result = _invoke(runner, store_dir, "show", "n1", "1")
        assert result.exit_code == 0
        assert "Hello" in result.output

    def test_show_missing(self, runner: CliRunner, store_dir: str, two_versions: Path) -> None:
        result = _invoke(runner, store_dir, "show", "n1", "9")
        assert result.exit_code == 1

    def test_compare(self, runner: CliRunner, store_dir: str, two_versions: Path) -> None:
        result = _invoke(runner, store_dir, "compare", "n1", "1", "2")
        assert result.exit_code == 0
        assert "Changed 6 characters" in result.output

    def test_compare_missing(self, runner: CliRunner, store_dir: str, two_versions: Path) -> None:
        result = _invoke(runner, store_dir, "compare", "n1", "1", "5")
        assert result.exit_code == 1


class TestRestoreAndDelete:
    def test_restore_to_file(
        self, runner: CliRunner, store_dir: str, two_versions: Path, tmp_path: Path
    ) -> None:
        target = tmp_path / "restored.md"
        result = _invoke(runner, store_dir, "restore", "n1", "1", "--output", str(target))
        assert result.exit_code == 0
        assert target.read_text(encoding="utf-8") == "Hello"
        assert len(_history(runner, store_dir)) == 2

    def test_restore_to_stdout(
        self, runner: CliRunner, store_dir: str, two_versions: Path
    ) -> None:
        result = _invoke(runner, store_dir, "restore", "n1", "1")
        assert result.exit_code == 0
        assert result.output.startswith("Hello")

    def test_restore_recorded(self, runner: CliRunner, store_dir: str, two_versions: Path) -> None:
        result = _invoke(runner, store_dir, "restore", "n1", "1", "--record")
        assert result.exit_code == 0
        history = _history(runner, store_dir)
        assert history[0]["version"] == 3
        assert history[0]["change_type"] == "restore"

    def test_no_record_overrides_config(
        self, runner: CliRunner, store_dir: str, two_versions: Path, tmp_path: Path
    ) -> None:
        config = _write(tmp_path / "notevc.yaml", "restore_policy: record_version\n")
        result = runner.invoke(
            cli, ["--store", store_dir, "--config", config, "restore", "n1", "1", "--no-record"]
        )
        assert result.exit_code == 0
        assert len(_history(runner, store_dir)) == 2

    def test_restore_missing(self, runner: CliRunner, store_dir: str, two_versions: Path) -> None:
        assert _invoke(runner, store_dir, "restore", "n1", "7").exit_code == 1

    def test_delete_current_refused(
        self, runner: CliRunner, store_dir: str, two_versions: Path
    ) -> None:
        result = _invoke(runner, store_dir, "delete", "n1", "2", "--current", "2")
        assert result.exit_code == 1
        assert len(_history(runner, store_dir)) == 2

    def test_delete(self, runner: CliRunner, store_dir: str, two_versions: Path) -> None:
        result = _invoke(runner, store_dir, "delete", "n1", "1", "--current", "2")
        assert result.exit_code == 0
        assert [record["version"] for record in _history(runner, store_dir)] == [2]

    def test_delete_missing(self, runner: CliRunner, store_dir: str, two_versions: Path) -> None:
        assert _invoke(runner, store_dir, "delete", "n1", "8").exit_code == 1


class TestQuotaAndCleanup:
    def test_quota(self, runner: CliRunner, store_dir: str, two_versions: Path) -> None:
        result = _invoke(runner, store_dir, "quota")
        assert result.exit_code == 0
        assert "Documents" in result.output
        assert "Versions" in result.output

    def test_cleanup_needs_an_option(self, runner: CliRunner, store_dir: str) -> None:
        assert _invoke(runner, store_dir, "cleanup").exit_code == 1

    def test_cleanup_keep(self, runner: CliRunner, store_dir: str, two_versions: Path) -> None:
        result = _invoke(runner, store_dir, "cleanup", "--keep", "1")
        assert result.exit_code == 0
        assert "Trimmed" in result.output
        assert [record["version"] for record in _history(runner, store_dir)] == [2]

    def test_cleanup_emergency_when_healthy(
        self, runner: CliRunner, store_dir: str, two_versions: Path
    ) -> None:
        result = _invoke(runner, store_dir, "cleanup", "--emergency")
        assert result.exit_code == 0
        assert len(_history(runner, store_dir)) == 2


class TestConfigOption:
    def test_config_file_applies(
        self, runner: CliRunner, store_dir: str, tmp_path: Path
    ) -> None:
        config = _write(tmp_path / "notevc.yaml", "max_versions_per_document: 1\n")
        note = tmp_path / "note.md"
        for content in ("one", "two", "three"):
            _write(note, content)
            runner.invoke(
                cli, ["--store", store_dir, "--config", config, "save", str(note), "--id", "n1"]
            )
        assert [record["version"] for record in _history(runner, store_dir)] == [3]

    def test_bad_config_file(self, runner: CliRunner, store_dir: str, tmp_path: Path) -> None:
        config = _write(tmp_path / "notevc.yaml", "max_versions: 1\n")
        result = runner.invoke(cli, ["--store", store_dir, "--config", config, "quota"])
        assert result.exit_code == 1
        assert "Config error" in result.output
