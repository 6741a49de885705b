"""Debounced auto-save scheduling."""
from __future__ import annotations

from notevc.scheduler.autosave import AutoSaveScheduler

__all__ = ["AutoSaveScheduler"]
