"""
docsync/schemas package marker.
"""

from docsync.schemas.sync import (
    SyncErrorResponse,
    SyncFailureResponse,
    SyncReportResponse,
    SyncResultResponse,
    SyncServiceInfoResponse,
    UnauthorizedResponse,
)

__all__ = [
    "SyncErrorResponse",
    "SyncFailureResponse",
    "SyncReportResponse",
    "SyncResultResponse",
    "SyncServiceInfoResponse",
    "UnauthorizedResponse",
]
