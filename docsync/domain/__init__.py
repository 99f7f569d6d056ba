"""
docsync/domain package marker.
"""

from docsync.domain.sync_run import (
    ClassifiedContent,
    CollectionOutcome,
    CollectionStatus,
    ContentClassification,
    FileStatus,
    RunReport,
    SourceItem,
    SyncResult,
    TransferEncoding,
    UploadErrorDetail,
    UploadOutcome,
    UploadStatus,
)

__all__ = [
    "ClassifiedContent",
    "CollectionOutcome",
    "CollectionStatus",
    "ContentClassification",
    "FileStatus",
    "RunReport",
    "SourceItem",
    "SyncResult",
    "TransferEncoding",
    "UploadErrorDetail",
    "UploadOutcome",
    "UploadStatus",
]
