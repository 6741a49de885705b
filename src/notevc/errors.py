"""Error types for notevc.

These exceptions are raised inside the core and caught at its public
boundary: ``VersionStore``, ``QuotaManager``, ``RestoreCoordinator`` and
the service facade turn them into ``None``/``False`` return values plus
a log record.  Only ``ConfigError`` escapes, since a bad configuration
is a programming error at process start.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from notevc.validator.issues import ValidationIssue


class VersionControlError(Exception):
    """Base class for all notevc errors."""


class ValidationFailure(VersionControlError):
    """A document or snapshot failed validation.

    Parameters
    ----------
    issues:
        The individual findings that caused the failure.
    """

    def __init__(self, issues: list["ValidationIssue"]) -> None:
        self.issues = list(issues)
        detail = "; ".join(str(issue) for issue in self.issues) or "invalid data"
        super().__init__(f"Validation failed: {detail}")


class QuotaExceeded(VersionControlError):
    """A backend write did not fit even after emergency cleanup."""

    def __init__(self, document_id: str, reason: str = "") -> None:
        self.document_id = document_id
        message = f"Storage quota exceeded while writing history of {document_id!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NotFound(VersionControlError, KeyError):
    """A document history or version number does not exist."""

    def __init__(self, document_id: str, version: int | None = None) -> None:
        self.document_id = document_id
        self.version = version
        if version is None:
            message = f"No history stored for document {document_id!r}"
        else:
            message = f"Version {version} of document {document_id!r} not found"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class ReentrancyBlocked(VersionControlError):
    """A save was attempted while a restore was in progress."""

    def __init__(self, document_id: str) -> None:
        self.document_id = document_id
        super().__init__(f"Save of {document_id!r} blocked: restore in progress")


class NoOp(VersionControlError):
    """Nothing needed to be persisted.  Not a real failure."""

    def __init__(self, document_id: str, reason: str) -> None:
        self.document_id = document_id
        self.reason = reason
        super().__init__(f"No new version for {document_id!r}: {reason}")


class CorruptHistory(VersionControlError, ValueError):
    """Stored history text could not be decoded at all."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Stored history of {key!r} is unreadable: {reason}")


class StorageCapacityError(VersionControlError):
    """A backend refused a write because its capacity would be exceeded.

    Parameters
    ----------
    key:
        The document id being written.
    required:
        Bytes the backend would hold after the write.
    capacity:
        The backend's configured capacity in bytes.
    """

    def __init__(self, key: str, required: int, capacity: int) -> None:
        self.key = key
        self.required = required
        self.capacity = capacity
        super().__init__(
            f"Writing {key!r} needs {required} bytes but backend capacity is {capacity}"
        )


class ConfigError(ValueError):
    """Raised when a configuration value is missing or out of range."""
