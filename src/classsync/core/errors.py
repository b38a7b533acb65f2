# src/classsync/core/errors.py

"""
Error taxonomy.

Every failure is terminal for the action that triggered it and is reported
to the caller; nothing here is retried automatically.
"""

from __future__ import annotations


class ClassSyncError(Exception):
    """Base class for classified ClassSync failures."""


class ValidationError(ClassSyncError, ValueError):
    """A task field is missing or malformed (title/teacher/deadline)."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidInput(ClassSyncError, ValueError):
    """Extraction was requested with neither note text nor an image."""


class ExtractionFailure(ClassSyncError):
    """
    The AI service could not produce a usable task.

    reason is one of: auth, rate_limit, network, service, empty_reply,
    invalid_json, schema, offline.
    """

    def __init__(self, message: str, *, reason: str = "service") -> None:
        super().__init__(message)
        self.reason = reason


class ExtractionInProgress(ClassSyncError):
    """An auto-fill request is already pending for this draft form."""


class PersistenceWarning(UserWarning):
    """Writing the task collection failed; in-memory state stays authoritative."""
