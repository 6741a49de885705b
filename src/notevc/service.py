"""Outward-facing version-control service.

``VersionControlService`` wires the components together and is the only
surface an application (note CRUD, editor UI) is meant to call.  Build
one instance at process start and pass it where it is needed::

    from notevc import VersionControlService
    from notevc.models import Document

    service = VersionControlService.create()
    doc = Document(id="n1", title="Notes", content="Hello")
    service.open_document(doc)
    service.create_manual_version(doc)
    ...
    service.dispose()

Every method returns ``None``/``False`` for expected failures instead of
raising; the reason is logged and, for store operations, kept on
``service.store.last_failure``.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Callable

from notevc.backends.base import StorageBackend
from notevc.backends.memory import InMemoryBackend
from notevc.config import VersionControlConfig
from notevc.detect.detector import MeaningfulCheck
from notevc.models.nodes import (
    ChangeType,
    DocumentAccessor,
    NoteVersion,
    QuotaStatus,
    VersionComparison,
    VersionControlState,
)
from notevc.models.serializer import SnapshotSerializer
from notevc.quota.manager import QuotaManager
from notevc.restore.coordinator import RestoreCoordinator
from notevc.scheduler.autosave import AutoSaveScheduler, TimerLoop
from notevc.store.version_store import VersionStore

logger = logging.getLogger(__name__)


class VersionControlService:
    """Facade over store, quota manager, scheduler and restore coordinator.

    Use :meth:`create` rather than calling the constructor directly
    unless the components need to be assembled by hand.
    """

    def __init__(
        self,
        config: VersionControlConfig,
        store: VersionStore,
        quota: QuotaManager,
        scheduler: AutoSaveScheduler,
        coordinator: RestoreCoordinator,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._store = store
        self._quota = quota
        self._scheduler = scheduler
        self._coordinator = coordinator
        self._clock = clock

        self._documents: dict[str, DocumentAccessor] = {}
        self._baselines: dict[str, str] = {}
        self._auto_save_disabled: set[str] = set()
        self._disposed = False

        quota.set_protection_check(self._is_current_version)

    @classmethod
    def create(
        cls,
        config: VersionControlConfig | None = None,
        backend: StorageBackend | None = None,
        loop: TimerLoop | None = None,
        clock: Callable[[], float] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> "VersionControlService":
        """Assemble a service with every component sharing one config.

        Parameters
        ----------
        config:
            Defaults to ``VersionControlConfig()``.
        backend:
            Defaults to a fresh :class:`InMemoryBackend`.
        loop:
            Event loop for auto-save timers; the running loop by default.
        clock:
            Epoch-seconds clock for snapshot timestamps and rate limits.
        id_factory:
            Snapshot id generator, mainly for tests.
        """
        config = config or VersionControlConfig()
        backend = backend if backend is not None else InMemoryBackend()
        clock = clock or time.time
        serializer = SnapshotSerializer()

        quota = QuotaManager(backend, config, serializer)
        store_kwargs = {"id_factory": id_factory} if id_factory is not None else {}
        store = VersionStore(
            backend,
            config,
            quota=quota,
            serializer=serializer,
            clock=clock,
            **store_kwargs,
        )
        scheduler = AutoSaveScheduler(store, config.auto_save_interval, loop=loop)
        coordinator = RestoreCoordinator(store, config.restore_policy)
        return cls(config, store, quota, scheduler, coordinator, clock=clock)

    # ------------------------------------------------------------------
    # Component access
    # ------------------------------------------------------------------

    @property
    def config(self) -> VersionControlConfig:
        return self._config

    @property
    def store(self) -> VersionStore:
        return self._store

    @property
    def quota(self) -> QuotaManager:
        return self._quota

    @property
    def scheduler(self) -> AutoSaveScheduler:
        return self._scheduler

    @property
    def coordinator(self) -> RestoreCoordinator:
        return self._coordinator

    # ------------------------------------------------------------------
    # Document tracking
    # ------------------------------------------------------------------

    def open_document(self, document: DocumentAccessor) -> None:
        """Start tracking ``document`` and arm its auto-save.

        Documents exposing ``subscribe`` (such as
        :class:`~notevc.models.Document`) report their own edits;
        other accessors should call :meth:`notify_edit` after each edit.
        """
        self._documents[document.id] = document
        self._baselines[document.id] = document.content
        subscribe = getattr(document, "subscribe", None)
        if callable(subscribe):
            subscribe(self.notify_edit)
        if self.is_auto_save_enabled(document.id):
            self._scheduler.schedule(document.id, document)

    def close_document(self, document_id: str) -> None:
        """Stop tracking a document and cancel its pending auto-save."""
        self._scheduler.cancel(document_id)
        document = self._documents.pop(document_id, None)
        self._baselines.pop(document_id, None)
        unsubscribe = getattr(document, "unsubscribe", None)
        if callable(unsubscribe):
            unsubscribe(self.notify_edit)

    def notify_edit(self, document: DocumentAccessor) -> None:
        """Reschedule the auto-save of ``document`` if its content meaningfully changed."""
        baseline = self._baselines.get(document.id, "")
        if not self._store.detector.has_meaningful_changes(baseline, document.content):
            return
        if self.is_auto_save_enabled(document.id):
            self._scheduler.schedule(document.id, document)

    def has_unsaved_changes(self, document: DocumentAccessor) -> bool:
        baseline = self._baselines.get(document.id)
        if baseline is None:
            return False
        return self._store.detector.has_meaningful_changes(baseline, document.content)

    def _is_current_version(self, document_id: str, version: int) -> bool:
        document = self._documents.get(document_id)
        return document is not None and document.version == version

    # ------------------------------------------------------------------
    # Collaborator API
    # ------------------------------------------------------------------

    def create_manual_version(
        self, document: DocumentAccessor, description: str | None = None
    ) -> NoteVersion | None:
        """Snapshot ``document`` now.  ``None`` means there was nothing to save."""
        snapshot = self._store.save_version(document, ChangeType.MANUAL, description)
        if snapshot is None:
            return None
        document.update(version=snapshot.version, now=self._clock())
        self._baselines[document.id] = document.content
        return snapshot

    def restore_version(self, document: DocumentAccessor, version: int) -> NoteVersion | None:
        """Write snapshot ``version`` back into ``document``.

        Returns the applied snapshot: the target itself, or the new
        ``RESTORE`` snapshot when the config records restores.  Only a
        recorded restore moves the document's version pointer; an
        apply-only restore leaves it on the version it already had.
        """

        def apply(snapshot: NoteVersion) -> None:
            self._baselines[document.id] = snapshot.content
            recorded = snapshot.version != version
            document.update(
                title=snapshot.title,
                content=snapshot.content,
                version=snapshot.version if recorded else None,
                now=self._clock(),
            )

        return self._coordinator.restore(document.id, version, apply=apply)

    def delete_version(self, document: DocumentAccessor, version: int) -> bool:
        """Delete one snapshot; never the document's current version."""
        current = document.version or None
        if not self._store.delete_version(document.id, version, current_version=current):
            return False
        document.update(
            version=self._store.get_current_version_number(document.id),
            now=self._clock(),
        )
        return True

    def delete_history(self, document_id: str) -> None:
        self._store.delete_history(document_id)

    def get_versions(self, document_id: str) -> list[NoteVersion]:
        return self._store.get_versions(document_id)

    def get_quota_status(self) -> QuotaStatus:
        return self._quota.check_quota()

    def enable_auto_save(self, document_id: str) -> None:
        """Turn auto-save back on and arm it if the document is open."""
        self._auto_save_disabled.discard(document_id)
        document = self._documents.get(document_id)
        if document is not None:
            self._scheduler.schedule(document_id, document)

    def disable_auto_save(self, document_id: str) -> None:
        self._auto_save_disabled.add(document_id)
        self._scheduler.cancel(document_id)

    def is_auto_save_enabled(self, document_id: str) -> bool:
        return document_id not in self._auto_save_disabled

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def compare_versions(
        self, document_id: str, old_version: int, new_version: int
    ) -> VersionComparison:
        return self._store.compare_versions(document_id, old_version, new_version)

    def check_meaningful_changes(self, old: str, new: str) -> MeaningfulCheck:
        return self._store.detector.check(old, new)

    def get_state(self, document_id: str) -> VersionControlState:
        return self._store.get_state(document_id)

    def get_next_version_number(self, document_id: str) -> int:
        return self._store.get_next_version_number(document_id)

    def auto_save_settings(self) -> dict[str, float]:
        return {
            "interval": self._config.auto_save_interval,
            "min_seconds_between_saves": self._config.min_seconds_between_saves,
            "min_change_threshold": self._config.min_change_threshold,
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def dispose(self) -> None:
        """Cancel all timers and stop tracking every document.  Idempotent."""
        if self._disposed:
            return
        for document_id in list(self._documents):
            self.close_document(document_id)
        self._scheduler.dispose()
        self._disposed = True
        logger.debug("Version control service disposed")
