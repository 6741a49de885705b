"""Per-document snapshot histories."""
from __future__ import annotations

from notevc.store.version_store import VersionStore

__all__ = ["VersionStore"]
