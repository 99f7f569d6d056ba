"""
docsync/services/run_aggregator.py

Merge per-item stage outcomes into the final run report.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from docsync.domain.sync_run import (
    CollectionOutcome,
    CollectionStatus,
    RunReport,
    SyncResult,
    UploadErrorDetail,
    UploadOutcome,
    UploadStatus,
)


def aggregate_run(
    upload_outcomes: Sequence[UploadOutcome],
    collection_outcomes: Sequence[CollectionOutcome],
    timestamp: datetime,
) -> RunReport:
    """
    Build the run report in listing order.

    ``collection_outcomes`` are keyed by remote id; the last one for an id
    wins. Uploaded files without a collection outcome report None.
    """

    collection_by_remote_id = {
        outcome.remote_id: outcome.collection_status for outcome in collection_outcomes
    }

    results: list[SyncResult] = []
    errors: list[UploadErrorDetail] = []
    successful = 0
    failed = 0
    added = 0

    for outcome in upload_outcomes:
        collection_status: str | None = None
        if outcome.status == UploadStatus.UPLOADED:
            successful += 1
            collection_status = collection_by_remote_id.get(outcome.remote_id)
            if collection_status == CollectionStatus.ADDED:
                added += 1
        else:
            failed += 1
            errors.append(
                UploadErrorDetail(
                    file=outcome.path,
                    error=outcome.error_message or "Unknown error",
                )
            )

        results.append(
            SyncResult(
                file=outcome.path,
                status=outcome.status,
                remote_id=outcome.remote_id,
                collection_status=collection_status,
                size=outcome.size_bytes,
                uploaded_at=outcome.last_modified,
            )
        )

    return RunReport(
        total_files=len(upload_outcomes),
        successful=successful,
        failed=failed,
        added_to_collection=added,
        timestamp=timestamp,
        results=results,
        errors=errors,
    )
