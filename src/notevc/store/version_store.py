"""Per-document snapshot histories.

``VersionStore`` owns everything about a single document's history:
version-number allocation, validation of what goes in and comes out,
the decision whether a save is warranted at all, and write-through
persistence to a :class:`~notevc.backends.base.StorageBackend`.

Histories are kept newest first.  Version numbers are always
``max(existing) + 1`` (or ``1`` for an empty history), so numbers are
never reused while a history exists and restart at 1 once it has been
emptied.

None of the public methods raise for expected failures.  They return
``None``/``False``, log the reason, and keep the failure on
:attr:`VersionStore.last_failure`.

Usage
-----
::

    from notevc.backends import InMemoryBackend
    from notevc.models import ChangeType, Document
    from notevc.store import VersionStore

    store = VersionStore(InMemoryBackend())
    doc = Document(id="n1", title="Notes", content="Hello")
    v1 = store.save_version(doc, ChangeType.MANUAL)
    store.get_versions("n1")      # [v1]
"""
from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable

from notevc.backends.base import StorageBackend
from notevc.config import VersionControlConfig
from notevc.detect.detector import ChangeDetector
from notevc.diff.diff import describe, diff
from notevc.errors import (
    CorruptHistory,
    NoOp,
    NotFound,
    QuotaExceeded,
    ReentrancyBlocked,
    StorageCapacityError,
    ValidationFailure,
    VersionControlError,
)
from notevc.models.nodes import (
    ChangeType,
    DiffStats,
    DocumentAccessor,
    NoteVersion,
    VersionComparison,
    VersionControlState,
)
from notevc.models.serializer import SnapshotSerializer
from notevc.quota.manager import QuotaManager
from notevc.validator.validator import Validator

logger = logging.getLogger(__name__)

HistoryListener = Callable[[str], None]


class VersionStore:
    """Ordered, capped, persisted snapshot histories keyed by document id.

    Parameters
    ----------
    backend:
        Where serialized histories live.
    config:
        History cap, size limits and auto-save thresholds.
    quota:
        When given, every write goes through its capacity-remediating
        :meth:`~notevc.quota.QuotaManager.write` and saves trigger a
        pre-save trim when storage needs cleanup.
    detector:
        Meaningful-change detector.  Built from ``config.normalization``
        when omitted.
    clock:
        Returns the current time as epoch seconds.
    id_factory:
        Produces snapshot identifiers.
    """

    def __init__(
        self,
        backend: StorageBackend,
        config: VersionControlConfig | None = None,
        quota: QuotaManager | None = None,
        detector: ChangeDetector | None = None,
        serializer: SnapshotSerializer | None = None,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self._backend = backend
        self._config = config or VersionControlConfig()
        self._quota = quota
        self._detector = detector or ChangeDetector(self._config.normalization)
        self._serializer = serializer or SnapshotSerializer()
        self._validator = Validator(self._config.max_content_size)
        self._clock = clock
        self._new_id = id_factory

        self._cache: dict[str, list[NoteVersion]] = {}
        self._last_save_times: dict[str, float] = {}
        self._is_restoring: Callable[[], bool] = lambda: False
        self._history_listeners: list[HistoryListener] = []
        self.last_failure: VersionControlError | None = None

        if quota is not None:
            quota.add_eviction_listener(self.invalidate)

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    @property
    def config(self) -> VersionControlConfig:
        return self._config

    @property
    def detector(self) -> ChangeDetector:
        return self._detector

    def set_reentrancy_check(self, check: Callable[[], bool]) -> None:
        """Install the predicate telling the store a restore is in progress."""
        self._is_restoring = check

    def on_history_deleted(self, listener: HistoryListener) -> None:
        """Call ``listener(document_id)`` after :meth:`delete_history`."""
        self._history_listeners.append(listener)

    def invalidate(self, document_id: str) -> None:
        """Drop the cached history of ``document_id``."""
        self._cache.pop(document_id, None)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def get_versions(self, document_id: str) -> list[NoteVersion]:
        """Return the history of ``document_id``, newest first.

        Invalid records are discarded and duplicate version numbers are
        collapsed to their first occurrence.  The cleaned history is
        cached until the next write or eviction.
        """
        cached = self._cache.get(document_id)
        if cached is not None:
            return list(cached)

        try:
            text = self._backend.read(document_id)
        except CorruptHistory as exc:
            logger.error("%s; ignoring it", exc)
            return []
        except OSError:
            logger.exception("Error loading versions of %r", document_id)
            return []
        if text is None:
            self._cache[document_id] = []
            return []

        try:
            records = self._serializer.load_records(text)
        except ValueError:
            logger.error("Stored history of %r is corrupt; ignoring it", document_id)
            return []

        valid: list[NoteVersion] = []
        for record in records:
            try:
                snapshot = self._serializer.from_dict(record)
            except ValueError as exc:
                logger.debug("Discarding malformed record of %r: %s", document_id, exc)
                continue
            if self._validator.is_valid_snapshot(snapshot):
                valid.append(snapshot)
        if len(valid) != len(records):
            logger.warning(
                "Cleaned %d invalid version(s) for document %r",
                len(records) - len(valid),
                document_id,
            )

        seen: set[int] = set()
        unique: list[NoteVersion] = []
        for snapshot in valid:
            if snapshot.version in seen:
                continue
            seen.add(snapshot.version)
            unique.append(snapshot)
        if len(unique) != len(valid):
            logger.warning(
                "Removed %d duplicate version(s) for document %r",
                len(valid) - len(unique),
                document_id,
            )

        unique.sort(key=lambda snapshot: snapshot.version, reverse=True)
        self._cache[document_id] = unique
        return list(unique)

    def find_version(self, document_id: str, version_number: int) -> NoteVersion | None:
        for snapshot in self.get_versions(document_id):
            if snapshot.version == version_number:
                return snapshot
        return None

    def get_next_version_number(self, document_id: str) -> int:
        """``max(existing) + 1``, or ``1`` for an empty history."""
        return self.get_current_version_number(document_id) + 1

    def get_current_version_number(self, document_id: str) -> int:
        """``max(existing)``, or ``0`` for an empty history."""
        versions = self.get_versions(document_id)
        return max((snapshot.version for snapshot in versions), default=0)

    def get_state(self, document_id: str) -> VersionControlState:
        versions = self.get_versions(document_id)
        current = versions[0].version if versions else 0
        return VersionControlState(
            versions=tuple(versions),
            current_version=current,
            last_saved_version=current,
        )

    def compare_versions(
        self, document_id: str, old_version: int, new_version: int
    ) -> VersionComparison:
        """Diff two snapshots of the same document by version number.

        When either version is missing the comparison carries zero stats.
        """
        old = self.find_version(document_id, old_version)
        new = self.find_version(document_id, new_version)
        if old is None or new is None:
            missing = old_version if old is None else new_version
            self._record(NotFound(document_id, missing), logging.INFO)
            return VersionComparison(old=old, new=new, diff_stats=DiffStats.zero())
        return VersionComparison(old=old, new=new, diff_stats=diff(old.content, new.content))

    def last_save_time(self, document_id: str) -> float | None:
        """When ``document_id`` was last saved.

        Falls back to the newest snapshot's timestamp when no save has
        happened in this process.
        """
        recorded = self._last_save_times.get(document_id)
        if recorded is not None:
            return recorded
        versions = self.get_versions(document_id)
        return versions[0].created_at if versions else None

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def save_version(
        self,
        document: DocumentAccessor,
        change_type: ChangeType = ChangeType.AUTO,
        description: str | None = None,
    ) -> NoteVersion | None:
        """Record a new snapshot of ``document`` if one is warranted.

        Parameters
        ----------
        document:
            The document to snapshot.
        change_type:
            ``AUTO`` saves are rate-limited and must exceed the minimum
            change threshold.  ``RESTORE`` saves skip the change checks
            and carry zeroed diff stats.
        description:
            Overrides the generated change description.

        Returns
        -------
        NoteVersion | None
            The new snapshot, or ``None`` when nothing was persisted.
        """
        try:
            snapshot = self._save(document, change_type, description)
        except NoOp as exc:
            self._record(exc, logging.DEBUG)
            return None
        except ReentrancyBlocked as exc:
            self._record(exc, logging.INFO)
            return None
        except (ValidationFailure, QuotaExceeded) as exc:
            self._record(exc, logging.ERROR)
            return None
        except OSError:
            logger.exception("Error saving a version of %r", getattr(document, "id", None))
            return None
        self.last_failure = None
        return snapshot

    def _save(
        self,
        document: DocumentAccessor,
        change_type: ChangeType,
        description: str | None,
    ) -> NoteVersion:
        issues = self._validator.validate_document(document)
        if issues:
            raise ValidationFailure(issues)
        document_id = document.id

        if self._is_restoring() and change_type is not ChangeType.RESTORE:
            raise ReentrancyBlocked(document_id)

        now = self._clock()
        if change_type is ChangeType.AUTO:
            last = self.last_save_time(document_id)
            if last is not None and now - last < self._config.min_seconds_between_saves:
                raise NoOp(document_id, "too soon since the last save")

        if self._quota is not None and self._quota.check_quota().needs_cleanup:
            logger.warning("Storage quota warning, cleaning up old versions")
            self._quota.cleanup_oldest(self._config.cleanup_target)

        history = self.get_versions(document_id)

        stats: DiffStats | None = None
        if change_type is ChangeType.RESTORE:
            stats = DiffStats.zero()
        elif history:
            latest = history[0]
            if not self._detector.has_meaningful_changes(latest.content, document.content):
                raise NoOp(document_id, "no meaningful changes")
            stats = diff(latest.content, document.content)
            if (
                change_type is ChangeType.AUTO
                and stats.added_lines == 0
                and stats.removed_lines == 0
                and stats.changed_chars < self._config.min_change_threshold
            ):
                raise NoOp(document_id, "change below the auto-save threshold")

        number = max((snapshot.version for snapshot in history), default=0) + 1
        if description is None:
            description = describe(stats) if history else "Initial version"

        snapshot = NoteVersion(
            id=self._new_id(),
            document_id=document_id,
            version=number,
            title=document.title,
            content=document.content,
            created_at=now,
            change_type=change_type,
            change_description=description,
            diff_stats=stats if history else None,
        )

        history.insert(0, snapshot)
        del history[self._config.max_versions_per_document :]

        self._persist(document_id, history)
        self._last_save_times[document_id] = now
        logger.info(
            "Saved version %d of %r (%s): %s",
            number,
            document_id,
            change_type.value,
            description,
        )
        return snapshot

    def _persist(self, document_id: str, history: list[NoteVersion]) -> None:
        """Write ``history`` through to the backend and the cache.

        Raises
        ------
        QuotaExceeded
            If the backend refused the write.
        """
        text = self._serializer.to_json(history)
        if self._quota is not None:
            written = self._quota.write(document_id, text)
        else:
            try:
                self._backend.write(document_id, text)
                written = True
            except StorageCapacityError as exc:
                raise QuotaExceeded(document_id, str(exc)) from exc
        if not written:
            self.invalidate(document_id)
            raise QuotaExceeded(document_id, "write failed after emergency cleanup")
        self._cache[document_id] = list(history)

    # ------------------------------------------------------------------
    # Deleting
    # ------------------------------------------------------------------

    def delete_version(
        self,
        document_id: str,
        version_number: int,
        current_version: int | None = None,
    ) -> bool:
        """Delete one snapshot.

        Refuses to delete ``current_version``.  Deleting the last
        remaining snapshot removes the stored history entirely, so the
        next save starts again at version 1.
        """
        if current_version is not None and version_number == current_version:
            logger.warning(
                "Cannot delete version %d of %r: it is the current version",
                version_number,
                document_id,
            )
            return False

        history = self.get_versions(document_id)
        remaining = [s for s in history if s.version != version_number]
        if len(remaining) == len(history):
            self._record(NotFound(document_id, version_number), logging.WARNING)
            return False

        try:
            if not remaining:
                self._backend.delete(document_id)
                self._cache[document_id] = []
                self._last_save_times.pop(document_id, None)
            else:
                self._persist(document_id, remaining)
        except QuotaExceeded as exc:
            self._record(exc, logging.ERROR)
            return False
        except OSError:
            logger.exception("Error deleting version %d of %r", version_number, document_id)
            return False

        logger.info("Deleted version %d of %r", version_number, document_id)
        return True

    def delete_history(self, document_id: str) -> None:
        """Remove every snapshot of ``document_id`` and notify listeners."""
        try:
            self._backend.delete(document_id)
        except OSError:
            logger.exception("Error deleting history of %r", document_id)
        self._cache.pop(document_id, None)
        self._last_save_times.pop(document_id, None)
        for listener in self._history_listeners:
            listener(document_id)
        logger.info("Deleted history of %r", document_id)

    def cleanup_document(self, document_id: str, max_versions: int = 10) -> int:
        """Keep only the newest ``max_versions`` snapshots of one document.

        Returns the number of snapshots removed.
        """
        history = self.get_versions(document_id)
        if len(history) <= max_versions:
            return 0
        kept = history[: max(1, max_versions)]
        try:
            self._persist(document_id, kept)
        except QuotaExceeded as exc:
            self._record(exc, logging.ERROR)
            return 0
        return len(history) - len(kept)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def _record(self, error: VersionControlError, level: int) -> None:
        self.last_failure = error
        logger.log(level, "%s", error)
