"""
docsync/services/upload_stage.py

Phase 1: fetch each source item, classify it and upload it downstream.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from docsync.connectors.base import IngestionClient, SourceStorage
from docsync.domain.sync_run import SourceItem, UploadOutcome, UploadStatus
from docsync.errors import FetchError, UploadError
from docsync.services.content_classifier import classify_content
from docsync.services.execution import RunDeadline, run_per_item

logger = logging.getLogger(__name__)

DEADLINE_EXCEEDED_MESSAGE = "Run deadline exceeded before upload completed"


class UploadStage:
    """
    Uploads every source item independently; one failure never stops the rest.
    """

    def __init__(
        self,
        *,
        storage: SourceStorage,
        ingestion: IngestionClient,
        max_workers: int = 4,
    ) -> None:
        self._storage = storage
        self._ingestion = ingestion
        self._max_workers = max(1, max_workers)

    def run(self, items: Sequence[SourceItem], deadline: RunDeadline) -> list[UploadOutcome]:
        """
        Return one outcome per item, in listing order.
        """

        return run_per_item(
            items,
            lambda item: self.upload_one(item, deadline),
            lambda item: self._failed(item, DEADLINE_EXCEEDED_MESSAGE),
            max_workers=self._max_workers,
            deadline=deadline,
            name="upload",
        )

    def upload_one(self, item: SourceItem, deadline: RunDeadline) -> UploadOutcome:
        if deadline.expired():
            return self._failed(item, DEADLINE_EXCEEDED_MESSAGE)

        logger.info(
            "Uploading file pathname=%s size=%s uploaded_at=%s",
            item.path,
            item.size_bytes,
            item.last_modified.isoformat(),
        )
        try:
            raw = self._storage.fetch_content(item.content_ref)
            content = classify_content(item.path, raw)
            if deadline.expired():
                return self._failed(item, DEADLINE_EXCEEDED_MESSAGE)
            remote_id = self._ingestion.upload_file(item.path, content.mime_type, content.payload)
        except (FetchError, UploadError) as exc:
            logger.error("File upload failed pathname=%s error=%s", item.path, exc)
            return self._failed(item, str(exc))
        except Exception as exc:
            logger.exception("Unhandled upload failure pathname=%s error=%s", item.path, exc)
            return self._failed(item, str(exc) or "Unknown error")

        logger.info("File uploaded pathname=%s remote_id=%s", item.path, remote_id)
        return UploadOutcome(
            path=item.path,
            status=UploadStatus.UPLOADED,
            size_bytes=item.size_bytes,
            last_modified=item.last_modified,
            remote_id=remote_id,
        )

    @staticmethod
    def _failed(item: SourceItem, message: str) -> UploadOutcome:
        return UploadOutcome(
            path=item.path,
            status=UploadStatus.UPLOAD_FAILED,
            size_bytes=item.size_bytes,
            last_modified=item.last_modified,
            error_message=message,
        )
