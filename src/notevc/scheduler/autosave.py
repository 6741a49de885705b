"""Debounced auto-save scheduling.

Each document has at most one pending auto-save timer.  Scheduling a
document again cancels its pending timer and arms a fresh one, so a
burst of edits produces a single save ``auto_save_interval`` seconds
after the last edit.  The store's minimum-interval check still applies
when the timer fires, which rate-limits saves even if timers are
re-armed in quick succession.

Timers run on an asyncio event loop.  Any object offering
``call_later(delay, callback)`` whose return value has ``cancel()``
works, which is how the tests drive the scheduler with a fake clock.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Protocol

from notevc.models.nodes import ChangeType, DocumentAccessor, NoteVersion
from notevc.store.version_store import VersionStore

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerLoop(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class AutoSaveScheduler:
    """Per-document single-slot auto-save timers.

    Parameters
    ----------
    store:
        Receives ``save_version(doc, ChangeType.AUTO)`` when a timer fires.
    interval:
        Seconds between scheduling and the save.
    loop:
        Event loop used for timers.  When omitted, the running asyncio
        loop at scheduling time is used.
    """

    def __init__(
        self,
        store: VersionStore,
        interval: float,
        loop: TimerLoop | None = None,
    ) -> None:
        self._store = store
        self._interval = interval
        self._loop = loop
        self._timers: dict[str, TimerHandle] = {}
        store.on_history_deleted(self.cancel)

    @property
    def interval(self) -> float:
        return self._interval

    def _resolve_loop(self) -> TimerLoop | None:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def schedule(self, document_id: str, document: DocumentAccessor) -> bool:
        """(Re)arm the auto-save timer of ``document_id``.

        Returns ``False`` when no event loop is available to run the timer.
        """
        loop = self._resolve_loop()
        if loop is None:
            logger.warning("No running event loop; auto-save for %r not scheduled", document_id)
            return False
        self.cancel(document_id)
        self._timers[document_id] = loop.call_later(
            self._interval, self._fire, document_id, document
        )
        logger.debug("Auto-save for %r scheduled in %.1fs", document_id, self._interval)
        return True

    def _fire(self, document_id: str, document: DocumentAccessor) -> NoteVersion | None:
        self._timers.pop(document_id, None)
        snapshot = self._store.save_version(document, ChangeType.AUTO)
        if snapshot is not None:
            logger.debug("Auto-saved %r as version %d", document_id, snapshot.version)
        return snapshot

    def cancel(self, document_id: str) -> None:
        """Clear the pending timer of ``document_id`` without firing it.  Idempotent."""
        handle = self._timers.pop(document_id, None)
        if handle is not None:
            handle.cancel()
            logger.debug("Auto-save for %r cancelled", document_id)

    def cancel_all(self) -> None:
        for document_id in list(self._timers):
            self.cancel(document_id)

    def pending(self, document_id: str) -> bool:
        return document_id in self._timers

    @property
    def pending_count(self) -> int:
        return len(self._timers)

    def dispose(self) -> None:
        """Cancel every outstanding timer."""
        self.cancel_all()
