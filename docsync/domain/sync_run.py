"""
docsync/domain/sync_run.py

Domain models for one document sync run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


class UploadStatus:
    UPLOADED = "uploaded"
    UPLOAD_FAILED = "upload-failed"


class CollectionStatus:
    ADDED = "added"
    COLLECTION_FAILED = "collection-failed"
    NOT_PROCESSED = "not-processed"


class TransferEncoding:
    TEXT = "text"
    BINARY = "binary"


@dataclass(frozen=True)
class SourceItem:
    """
    One file enumerated from the source storage listing.
    """

    path: str
    content_ref: str
    size_bytes: int
    last_modified: datetime


@dataclass(frozen=True)
class ContentClassification:
    mime_type: str
    transfer: str


@dataclass(frozen=True)
class ClassifiedContent:
    """
    Fetched content ready for multipart upload.
    """

    mime_type: str
    transfer: str
    payload: bytes | str


@dataclass(frozen=True)
class FileStatus:
    """
    Downstream processing state for one uploaded file.
    """

    processed: bool
    has_content: bool

    @property
    def is_ready(self) -> bool:
        return self.processed and self.has_content


@dataclass(frozen=True)
class UploadOutcome:
    """
    Result of the upload stage for one source item.
    """

    path: str
    status: str
    size_bytes: int
    last_modified: datetime
    remote_id: str | None = None
    error_message: str | None = None

    @property
    def uploaded(self) -> bool:
        return self.status == UploadStatus.UPLOADED and self.remote_id is not None


@dataclass(frozen=True)
class CollectionOutcome:
    """
    Collection assignment state for one uploaded file, keyed by remote id.
    """

    remote_id: str
    collection_status: str


@dataclass(frozen=True)
class SyncResult:
    """
    Merged per-item record in the final run report.
    """

    file: str
    status: str
    remote_id: str | None
    collection_status: str | None
    size: int
    uploaded_at: datetime


@dataclass(frozen=True)
class UploadErrorDetail:
    file: str
    error: str


@dataclass(frozen=True)
class RunReport:
    """
    Consolidated end-of-run report.
    """

    total_files: int
    successful: int
    failed: int
    added_to_collection: int
    timestamp: datetime
    results: list[SyncResult] = field(default_factory=list)
    errors: list[UploadErrorDetail] = field(default_factory=list)
