"""
docsync/schemas/sync.py

Response schemas for the document sync endpoint.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from docsync.domain.sync_run import RunReport


class SyncResultResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file: str
    status: str
    open_webui_id: str | None = Field(default=None, alias="openWebUIId")
    collection_status: str | None = Field(default=None, alias="collectionStatus")
    size: int = Field(..., ge=0)
    uploaded_at: datetime = Field(..., alias="uploadedAt")


class SyncErrorResponse(BaseModel):
    file: str
    error: str


class SyncReportResponse(BaseModel):
    """
    Consolidated sync run report.
    """

    model_config = ConfigDict(populate_by_name=True)

    total_files: int = Field(..., ge=0, alias="totalFiles")
    successful: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    added_to_collection: int = Field(..., ge=0, alias="addedToCollection")
    timestamp: datetime
    results: list[SyncResultResponse] = Field(default_factory=list)
    errors: list[SyncErrorResponse] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: RunReport) -> SyncReportResponse:
        return cls(
            total_files=report.total_files,
            successful=report.successful,
            failed=report.failed,
            added_to_collection=report.added_to_collection,
            timestamp=report.timestamp,
            results=[
                SyncResultResponse(
                    file=result.file,
                    status=result.status,
                    open_webui_id=result.remote_id,
                    collection_status=result.collection_status,
                    size=result.size,
                    uploaded_at=result.uploaded_at,
                )
                for result in report.results
            ],
            errors=[SyncErrorResponse(file=error.file, error=error.error) for error in report.errors],
        )


class SyncFailureResponse(BaseModel):
    error: str = "Sync operation failed"
    details: str | None = None
    timestamp: datetime


class UnauthorizedResponse(BaseModel):
    error: str = "Unauthorized"


class SyncServiceInfoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    endpoint: str
    method: str
    description: str
    last_updated: datetime = Field(..., alias="lastUpdated")
