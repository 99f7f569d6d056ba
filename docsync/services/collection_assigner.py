"""
docsync/services/collection_assigner.py

Phase 2b: attach ready files to the configured knowledge collection.
"""

from __future__ import annotations

import logging

from docsync.connectors.base import IngestionClient
from docsync.domain.sync_run import CollectionOutcome, CollectionStatus, UploadOutcome
from docsync.errors import AssignError

logger = logging.getLogger(__name__)


class CollectionAssigner:
    """
    Issues one association call per ready file. Failures never touch the upload.
    """

    def __init__(self, *, ingestion: IngestionClient, collection_id: str) -> None:
        self._ingestion = ingestion
        self._collection_id = collection_id

    def assign(self, outcome: UploadOutcome) -> CollectionOutcome:
        try:
            self._ingestion.add_file_to_collection(self._collection_id, outcome.remote_id)
        except AssignError as exc:
            logger.error(
                "Failed to add file to knowledge collection pathname=%s collection_id=%s error=%s",
                outcome.path,
                self._collection_id,
                exc,
            )
            return CollectionOutcome(outcome.remote_id, CollectionStatus.COLLECTION_FAILED)
        except Exception as exc:
            logger.exception(
                "Unhandled collection assignment failure pathname=%s error=%s",
                outcome.path,
                exc,
            )
            return CollectionOutcome(outcome.remote_id, CollectionStatus.COLLECTION_FAILED)

        logger.info(
            "File added to knowledge collection pathname=%s collection_id=%s",
            outcome.path,
            self._collection_id,
        )
        return CollectionOutcome(outcome.remote_id, CollectionStatus.ADDED)
