"""
docsync/errors.py

Exception taxonomy for sync runs.

Only ``SyncFatalError`` subclasses abort a run. Everything else is caught at
the per-item boundary and recorded on that item's outcome.
"""

from __future__ import annotations

from datetime import datetime, timezone


class SyncError(Exception):
    """Base exception for sync failures."""


class SyncFatalError(SyncError):
    """
    Raised when the whole run must be aborted before a report can be built.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.failed_at = datetime.now(timezone.utc)


class ConfigError(SyncFatalError):
    """Raised when a required credential or endpoint is missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            "Missing required environment variables: " + ", ".join(self.missing)
        )


class ListingError(SyncFatalError):
    """Raised when the source storage listing cannot be retrieved."""


class FetchError(SyncError):
    """Raised when source content cannot be downloaded."""


class UploadError(SyncError):
    """Raised when the downstream service does not return a file id."""


class StatusError(SyncError):
    """Raised when a processing-status check fails at the transport level."""


class AssignError(SyncError):
    """Raised when a file cannot be attached to a collection."""
