"""Restoring a document to an earlier snapshot.

The coordinator is either ``IDLE`` or ``RESTORING``.  While it is
restoring, the version store rejects every save that is not itself a
restore.  This keeps the document update a restore performs from
re-entering ``save_version`` through the document's change listeners.

Two policies exist:

``RestorePolicy.APPLY_ONLY``
    The target snapshot is handed back unchanged; history is untouched.
``RestorePolicy.RECORD_VERSION``
    A new ``RESTORE`` snapshot copying the target is appended, described
    as ``"Restored to version N"`` with zeroed diff stats.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum, auto

from notevc.config import RestorePolicy
from notevc.errors import NotFound, ReentrancyBlocked
from notevc.models.nodes import ChangeType, Document, NoteVersion
from notevc.store.version_store import VersionStore

logger = logging.getLogger(__name__)

ApplyCallback = Callable[[NoteVersion], None]


class RestoreState(Enum):
    """Lifecycle of a :class:`RestoreCoordinator`."""

    IDLE = auto()
    RESTORING = auto()


class RestoreCoordinator:
    """Applies historical snapshots under a fixed policy.

    Parameters
    ----------
    store:
        History to restore from.  The coordinator installs itself as the
        store's reentrancy check.
    policy:
        Whether restores append a new snapshot.
    """

    def __init__(
        self,
        store: VersionStore,
        policy: RestorePolicy = RestorePolicy.APPLY_ONLY,
    ) -> None:
        self._store = store
        self._policy = policy
        self._state = RestoreState.IDLE
        store.set_reentrancy_check(self.is_restoring)

    @property
    def state(self) -> RestoreState:
        return self._state

    @property
    def policy(self) -> RestorePolicy:
        return self._policy

    def is_restoring(self) -> bool:
        return self._state is RestoreState.RESTORING

    def restore(
        self,
        document_id: str,
        version_number: int,
        apply: ApplyCallback | None = None,
        policy: RestorePolicy | None = None,
    ) -> NoteVersion | None:
        """Restore ``document_id`` to ``version_number``.

        Parameters
        ----------
        document_id:
            Document whose history holds the target.
        version_number:
            Version to restore.
        apply:
            Called with the resulting snapshot while the coordinator is
            still ``RESTORING``, so the caller can write the content back
            to its document without triggering a save.
        policy:
            Overrides the coordinator's policy for this call only.

        Returns
        -------
        NoteVersion | None
            The target snapshot (``APPLY_ONLY``), the new ``RESTORE``
            snapshot (``RECORD_VERSION``), or ``None`` when the target is
            missing, the new snapshot could not be saved, or another
            restore is already running.
        """
        if self._state is RestoreState.RESTORING:
            logger.warning("%s", ReentrancyBlocked(document_id))
            return None

        self._state = RestoreState.RESTORING
        try:
            target = self._store.find_version(document_id, version_number)
            if target is None:
                logger.warning("%s", NotFound(document_id, version_number))
                return None

            effective = policy if policy is not None else self._policy
            if effective is RestorePolicy.RECORD_VERSION:
                result = self._store.save_version(
                    Document(id=document_id, title=target.title, content=target.content),
                    ChangeType.RESTORE,
                    f"Restored to version {version_number}",
                )
                if result is None:
                    return None
            else:
                result = target

            if apply is not None:
                apply(result)
            logger.info("Restored %r to version %d", document_id, version_number)
            return result
        except Exception:
            logger.exception("Error restoring %r to version %d", document_id, version_number)
            return None
        finally:
            self._state = RestoreState.IDLE

    def reset(self) -> None:
        """Force the coordinator back to ``IDLE``."""
        self._state = RestoreState.IDLE
