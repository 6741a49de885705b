"""Restoring documents to earlier snapshots."""
from __future__ import annotations

from notevc.restore.coordinator import RestoreCoordinator, RestoreState

__all__ = ["RestoreCoordinator", "RestoreState"]
