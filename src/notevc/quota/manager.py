"""Aggregate storage accounting and eviction for notevc.

The quota manager looks at every history held by a backend at once.  It
reports how much of the storage budget is in use, trims long histories,
and, when the budget is blown, evicts the oldest data until storage is
healthy again.  Every backend write made by the version store goes
through :meth:`QuotaManager.write`, which gives a write that hits the
backend's capacity exactly one emergency cleanup and one retry.

Usage
-----
::

    from notevc.backends import InMemoryBackend
    from notevc.config import VersionControlConfig
    from notevc.quota import QuotaManager

    quota = QuotaManager(InMemoryBackend(), VersionControlConfig())
    status = quota.check_quota()
    if status.needs_cleanup:
        quota.emergency_cleanup()
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from notevc.backends.base import StorageBackend
from notevc.config import EvictionGranularity, VersionControlConfig
from notevc.errors import CorruptHistory, StorageCapacityError
from notevc.models.nodes import NoteVersion, QuotaStatus
from notevc.models.serializer import SnapshotSerializer

logger = logging.getLogger(__name__)

EvictionListener = Callable[[str], None]
ProtectionCheck = Callable[[str, int], bool]


@dataclass(frozen=True)
class StorageUsage:
    """Raw storage figures across every history."""

    total_size: int
    document_count: int
    version_count: int


class QuotaManager:
    """Tracks and enforces the storage budget across all histories.

    Parameters
    ----------
    backend:
        The store holding every document's serialized history.
    config:
        Supplies ``max_total_size``, ``storage_warning_threshold`` and
        the eviction granularity.
    serializer:
        Used to read histories when trimming or evicting.
    is_protected:
        Optional ``(document_id, version) -> bool`` check.  Snapshot-level
        eviction never removes a protected snapshot.
    """

    def __init__(
        self,
        backend: StorageBackend,
        config: VersionControlConfig,
        serializer: SnapshotSerializer | None = None,
        is_protected: ProtectionCheck | None = None,
    ) -> None:
        self._backend = backend
        self._config = config
        self._serializer = serializer or SnapshotSerializer()
        self._is_protected = is_protected
        self._listeners: list[EvictionListener] = []

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def add_eviction_listener(self, listener: EvictionListener) -> None:
        """Call ``listener(document_id)`` whenever a stored history changes here."""
        self._listeners.append(listener)

    def set_protection_check(self, check: ProtectionCheck | None) -> None:
        self._is_protected = check

    def _notify(self, document_id: str) -> None:
        for listener in self._listeners:
            listener(document_id)

    # ------------------------------------------------------------------
    # Accounting
    # ------------------------------------------------------------------

    def _load(self, document_id: str) -> list[NoteVersion]:
        """Parse a stored history, dropping records that do not deserialize."""
        try:
            text = self._backend.read(document_id)
        except CorruptHistory as exc:
            logger.warning("%s; treating it as empty", exc)
            return []
        if text is None:
            return []
        try:
            records = self._serializer.load_records(text)
        except ValueError:
            logger.warning("History of %r is not valid JSON; treating it as empty", document_id)
            return []
        history: list[NoteVersion] = []
        for record in records:
            try:
                history.append(self._serializer.from_dict(record))
            except ValueError:
                continue
        history.sort(key=lambda snapshot: snapshot.version, reverse=True)
        return history

    def storage_usage(self) -> StorageUsage:
        """Total serialized size, number of histories and number of snapshots."""
        total_size = 0
        document_count = 0
        version_count = 0
        for document_id in self._backend.keys():
            try:
                text = self._backend.read(document_id)
            except CorruptHistory:
                # unreadable histories still occupy storage
                total_size += self._backend.size_of(document_id)
                document_count += 1
                logger.warning("Cannot count versions of %r: history is unreadable", document_id)
                continue
            if text is None:
                continue
            total_size += len(text.encode("utf-8"))
            document_count += 1
            try:
                version_count += len(self._serializer.load_records(text))
            except ValueError:
                logger.warning("Cannot count versions of %r: history is corrupt", document_id)
        return StorageUsage(total_size, document_count, version_count)

    def check_quota(self) -> QuotaStatus:
        """Report usage as a fraction of ``max_total_size``."""
        usage = self.storage_usage()
        fraction = usage.total_size / self._config.max_total_size
        threshold = self._config.storage_warning_threshold
        return QuotaStatus(
            is_healthy=fraction < threshold,
            usage_fraction=fraction,
            needs_cleanup=fraction > threshold,
            total_size=usage.total_size,
            document_count=usage.document_count,
            version_count=usage.version_count,
        )

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def _replace(self, document_id: str, history: list[NoteVersion]) -> bool:
        try:
            if history:
                self._backend.write(document_id, self._serializer.to_json(history))
            else:
                self._backend.delete(document_id)
        except (StorageCapacityError, OSError):
            logger.exception("Could not rewrite history of %r during cleanup", document_id)
            return False
        self._notify(document_id)
        return True

    def cleanup_oldest(self, max_per_document: int) -> int:
        """Truncate every history longer than ``max_per_document``.

        Keeps the newest entries.  Returns the number of snapshots removed.
        """
        keep = max(0, max_per_document)
        removed = 0
        for document_id in self._backend.keys():
            history = self._load(document_id)
            if len(history) <= keep:
                continue
            if self._replace(document_id, history[:keep]):
                removed += len(history) - keep
        if removed:
            logger.info("Trimmed %d old snapshot(s) to keep %d per document", removed, keep)
        return removed

    def emergency_cleanup(self) -> int:
        """Evict the oldest data until storage is healthy.

        With ``EvictionGranularity.HISTORY`` whole histories are deleted,
        ordered by the age of their oldest snapshot, and the return value
        counts histories.  With ``SNAPSHOT`` single snapshots are deleted
        oldest first, skipping each history's newest snapshot and any
        protected one, and the return value counts snapshots.
        """
        if self._config.eviction is EvictionGranularity.SNAPSHOT:
            cleaned = self._evict_snapshots()
        else:
            cleaned = self._evict_histories()
        if cleaned:
            logger.warning(
                "Emergency cleanup removed %d %s",
                cleaned,
                "snapshot(s)" if self._config.eviction is EvictionGranularity.SNAPSHOT
                else "history(ies)",
            )
        return cleaned

    def _oldest_age(self, document_id: str) -> float:
        history = self._load(document_id)
        if not history:
            return 0.0
        return min(snapshot.created_at for snapshot in history)

    def _evict_histories(self) -> int:
        candidates = sorted(self._backend.keys(), key=self._oldest_age)
        removed = 0
        for document_id in candidates:
            if self.check_quota().is_healthy:
                break
            try:
                self._backend.delete(document_id)
            except OSError:
                logger.exception("Could not delete history of %r", document_id)
                continue
            removed += 1
            logger.debug("Evicted history of %r", document_id)
            self._notify(document_id)
        return removed

    def _evict_snapshots(self) -> int:
        histories = {document_id: self._load(document_id) for document_id in self._backend.keys()}
        candidates: list[tuple[float, str, int]] = []
        for document_id, history in histories.items():
            for snapshot in history[1:]:
                if self._is_protected and self._is_protected(document_id, snapshot.version):
                    continue
                candidates.append((snapshot.created_at, document_id, snapshot.version))
        candidates.sort()

        removed = 0
        for _, document_id, version in candidates:
            if self.check_quota().is_healthy:
                break
            remaining = [s for s in histories[document_id] if s.version != version]
            if self._replace(document_id, remaining):
                histories[document_id] = remaining
                removed += 1
        return removed

    # ------------------------------------------------------------------
    # Guarded writes
    # ------------------------------------------------------------------

    def write(self, document_id: str, text: str) -> bool:
        """Write ``text`` under ``document_id``, remediating capacity errors once.

        On ``StorageCapacityError`` this runs one :meth:`emergency_cleanup`
        and retries the write once.  Returns ``False`` when the write
        still fails; never raises for capacity problems.
        """
        try:
            self._backend.write(document_id, text)
            return True
        except StorageCapacityError as exc:
            logger.warning("Storage capacity exceeded (%s); attempting cleanup", exc)

        cleaned = self.emergency_cleanup()
        logger.info("Emergency cleanup freed %d unit(s); retrying write of %r", cleaned, document_id)
        try:
            self._backend.write(document_id, text)
            return True
        except StorageCapacityError:
            logger.error("Write of %r failed even after emergency cleanup", document_id)
            return False
