"""Unit tests for notevc.config — VersionControlConfig loading and validation."""
from __future__ import annotations

from pathlib import Path

import pytest

from notevc.config import (
    EvictionGranularity,
    NormalizationConfig,
    RestorePolicy,
    VersionControlConfig,
)
from notevc.errors import ConfigError


class TestDefaults:
    def test_values(self) -> None:
        config = VersionControlConfig()
        assert config.max_versions_per_document == 50
        assert config.auto_save_interval == 300
        assert config.min_seconds_between_saves == 60
        assert config.min_change_threshold == 10
        assert config.max_content_size == 1024 * 1024
        assert config.max_total_size == 10 * 1024 * 1024
        assert config.storage_warning_threshold == 0.8
        assert config.restore_policy is RestorePolicy.APPLY_ONLY
        assert config.eviction is EvictionGranularity.HISTORY
        assert config.normalization == NormalizationConfig()

    def test_cleanup_target(self) -> None:
        assert VersionControlConfig().cleanup_target == 40

    def test_cleanup_target_never_below_one(self) -> None:
        config = VersionControlConfig(max_versions_per_document=5, cleanup_headroom=10)
        assert config.cleanup_target == 1

    def test_is_frozen(self) -> None:
        config = VersionControlConfig()
        with pytest.raises(AttributeError):
            config.max_versions_per_document = 3  # type: ignore[misc]

    def test_with_overrides(self) -> None:
        config = VersionControlConfig().with_overrides(auto_save_interval=60)
        assert config.auto_save_interval == 60
        assert config.max_versions_per_document == 50


class TestValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_versions_per_document": 0},
            {"auto_save_interval": 0},
            {"min_seconds_between_saves": -1},
            {"min_change_threshold": -1},
            {"max_content_size": 0},
            {"max_total_size": 0},
            {"storage_warning_threshold": 0},
            {"storage_warning_threshold": 1.5},
            {"cleanup_headroom": -1},
        ],
    )
    def test_out_of_range(self, overrides: dict[str, object]) -> None:
        with pytest.raises(ConfigError):
            VersionControlConfig(**overrides)  # type: ignore[arg-type]

    def test_config_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            VersionControlConfig(max_versions_per_document=0)


class TestFromDict:
    def test_empty_mapping_gives_defaults(self) -> None:
        assert VersionControlConfig.from_dict({}) == VersionControlConfig()

    def test_enums_from_strings(self) -> None:
        config = VersionControlConfig.from_dict(
            {"restore_policy": "RECORD_VERSION", "eviction": "snapshot"}
        )
        assert config.restore_policy is RestorePolicy.RECORD_VERSION
        assert config.eviction is EvictionGranularity.SNAPSHOT

    def test_bad_enum_value(self) -> None:
        with pytest.raises(ConfigError, match="restore_policy"):
            VersionControlConfig.from_dict({"restore_policy": "sometimes"})

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="max_versions"):
            VersionControlConfig.from_dict({"max_versions": 3})

    def test_not_a_mapping(self) -> None:
        with pytest.raises(ConfigError):
            VersionControlConfig.from_dict(["max_versions_per_document"])  # type: ignore[arg-type]

    def test_normalization_mapping(self) -> None:
        config = VersionControlConfig.from_dict(
            {"normalization": {"ignore_leading_whitespace": False}}
        )
        assert config.normalization.ignore_leading_whitespace is False
        assert config.normalization.ignore_trailing_whitespace is True

    def test_unknown_normalization_key(self) -> None:
        with pytest.raises(ConfigError):
            VersionControlConfig.from_dict({"normalization": {"ignore_case": True}})


class TestFromYaml:
    def test_loads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "notevc.yaml"
        path.write_text(
            "max_versions_per_document: 20\n"
            "auto_save_interval: 60\n"
            "restore_policy: record_version\n"
            "normalization:\n"
            "  ignore_empty_lines: false\n",
            encoding="utf-8",
        )
        config = VersionControlConfig.from_yaml(path)
        assert config.max_versions_per_document == 20
        assert config.auto_save_interval == 60
        assert config.restore_policy is RestorePolicy.RECORD_VERSION
        assert config.normalization.ignore_empty_lines is False

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert VersionControlConfig.from_yaml(path) == VersionControlConfig()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("max_versions_per_document: [1,\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            VersionControlConfig.from_yaml(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            VersionControlConfig.from_yaml(tmp_path / "missing.yaml")
