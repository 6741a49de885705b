"""Configuration for notevc.

All tunables live on a single frozen ``VersionControlConfig`` that is
built once at process start and handed to each component.  Values can
be loaded from a YAML file whose keys mirror the dataclass fields::

    max_versions_per_document: 50
    auto_save_interval: 300
    min_seconds_between_saves: 60
    restore_policy: record_version
    eviction: history
    normalization:
      ignore_leading_whitespace: false
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from notevc.errors import ConfigError


class RestorePolicy(Enum):
    """What a restore does to the history.

    APPLY_ONLY
        Hand the target snapshot back to the caller; history is unchanged.
    RECORD_VERSION
        Append a new ``RESTORE`` snapshot copying the target.
    """

    APPLY_ONLY = "apply_only"
    RECORD_VERSION = "record_version"


class EvictionGranularity(Enum):
    """Unit removed by the quota manager's emergency cleanup."""

    HISTORY = "history"
    SNAPSHOT = "snapshot"


@dataclass(frozen=True)
class NormalizationConfig:
    """Which whitespace differences the change detector ignores."""

    ignore_trailing_whitespace: bool = True
    ignore_leading_whitespace: bool = True
    ignore_empty_lines: bool = True
    ignore_whitespace_only_lines: bool = True


@dataclass(frozen=True)
class VersionControlConfig:
    """Tunables for every notevc component.

    Parameters
    ----------
    max_versions_per_document:
        History cap; saving past it drops the oldest snapshots.
    auto_save_interval:
        Seconds between the last edit and the scheduled auto-save.
    min_seconds_between_saves:
        Minimum gap between an auto-save and the previous save.
    min_change_threshold:
        Character changes an auto-save needs when no line was added or removed.
    max_content_size:
        Largest content (in characters) a snapshot may hold.
    max_total_size:
        Storage budget in bytes across every history.
    storage_warning_threshold:
        Usage fraction above which storage is reported unhealthy.
    cleanup_headroom:
        How far below ``max_versions_per_document`` the pre-save cleanup trims.
    restore_policy:
        Whether a restore records a new snapshot.
    eviction:
        Unit removed by emergency cleanup.
    normalization:
        Whitespace rules for meaningful-change detection.
    """

    max_versions_per_document: int = 50
    auto_save_interval: float = 300.0
    min_seconds_between_saves: float = 60.0
    min_change_threshold: int = 10
    max_content_size: int = 1024 * 1024
    max_total_size: int = 10 * 1024 * 1024
    storage_warning_threshold: float = 0.8
    cleanup_headroom: int = 10
    restore_policy: RestorePolicy = RestorePolicy.APPLY_ONLY
    eviction: EvictionGranularity = EvictionGranularity.HISTORY
    normalization: NormalizationConfig = field(default_factory=NormalizationConfig)

    def __post_init__(self) -> None:
        if self.max_versions_per_document < 1:
            raise ConfigError("max_versions_per_document must be at least 1")
        if self.auto_save_interval <= 0:
            raise ConfigError("auto_save_interval must be positive")
        if self.min_seconds_between_saves < 0:
            raise ConfigError("min_seconds_between_saves must not be negative")
        if self.min_change_threshold < 0:
            raise ConfigError("min_change_threshold must not be negative")
        if self.max_content_size < 1:
            raise ConfigError("max_content_size must be at least 1")
        if self.max_total_size < 1:
            raise ConfigError("max_total_size must be at least 1")
        if not 0 < self.storage_warning_threshold <= 1:
            raise ConfigError("storage_warning_threshold must be in (0, 1]")
        if self.cleanup_headroom < 0:
            raise ConfigError("cleanup_headroom must not be negative")

    @property
    def cleanup_target(self) -> int:
        """History length the pre-save cleanup trims every document to."""
        return max(1, self.max_versions_per_document - self.cleanup_headroom)

    def with_overrides(self, **changes: Any) -> "VersionControlConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VersionControlConfig":
        """Build a config from a plain mapping, rejecting unknown keys."""
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration key(s): {', '.join(unknown)}")

        values: dict[str, Any] = dict(data)
        if "restore_policy" in values:
            values["restore_policy"] = _enum_value(
                RestorePolicy, values["restore_policy"], "restore_policy"
            )
        if "eviction" in values:
            values["eviction"] = _enum_value(
                EvictionGranularity, values["eviction"], "eviction"
            )
        if "normalization" in values:
            values["normalization"] = _normalization_from(values["normalization"])
        try:
            return cls(**values)
        except TypeError as exc:
            raise ConfigError(str(exc)) from exc

    @classmethod
    def from_yaml(cls, path: str | Path) -> "VersionControlConfig":
        """Load a config from a YAML file.  An empty file yields defaults."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
        return cls.from_dict(data or {})


def _enum_value(enum_cls: type[Enum], raw: Any, key: str) -> Any:
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw).lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"{key} must be one of: {choices} (got {raw!r})") from None


def _normalization_from(raw: Any) -> NormalizationConfig:
    if isinstance(raw, NormalizationConfig):
        return raw
    if not isinstance(raw, dict):
        raise ConfigError("normalization must be a mapping")
    known = {f.name for f in fields(NormalizationConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown normalization key(s): {', '.join(unknown)}")
    return NormalizationConfig(**{key: bool(value) for key, value in raw.items()})
