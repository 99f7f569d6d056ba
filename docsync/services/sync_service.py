"""
docsync/services/sync_service.py

Two-phase document sync from source storage into the ingestion service.

Phase 1 uploads every listed item. Phase 2, only when a collection is
configured and something uploaded, waits for each file to finish processing
and attaches ready files to the collection. Only configuration and listing
failures abort a run; everything else is recorded on the affected item.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from docsync.config import ExternalHTTPSettings, SyncConfig, get_external_http_settings
from docsync.connectors import BlobStorageConnector, IngestionClient, OpenWebUIClient, SourceStorage
from docsync.domain.sync_run import CollectionOutcome, CollectionStatus, RunReport, SourceItem, UploadOutcome
from docsync.errors import ListingError
from docsync.logging_utils import log_event
from docsync.services.collection_assigner import CollectionAssigner
from docsync.services.execution import RunDeadline, run_per_item
from docsync.services.readiness_poller import ReadinessPoller
from docsync.services.run_aggregator import aggregate_run
from docsync.services.upload_stage import UploadStage

logger = logging.getLogger(__name__)


class SyncService:
    """
    Coordinates listing, upload, readiness polling, assignment and aggregation.
    """

    def __init__(
        self,
        *,
        config: SyncConfig,
        storage: SourceStorage,
        ingestion: IngestionClient,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._storage = storage
        self._ingestion = ingestion
        self._clock = clock
        self._upload_stage = UploadStage(
            storage=storage,
            ingestion=ingestion,
            max_workers=config.upload_concurrency,
        )
        self._poller = ReadinessPoller(
            ingestion=ingestion,
            policy=config.readiness,
            sleep=sleep,
        )

    def run(self) -> RunReport:
        """
        Execute one sync run. Raises ConfigError or ListingError only.
        """

        self._config.validate()
        run_id = uuid.uuid4().hex
        started_at = self._clock()
        deadline = RunDeadline(self._config.run_timeout_seconds, clock=self._clock)

        log_event(logger, logging.INFO, "sync_started", run_id=run_id)
        items = self._list_items(run_id)

        log_event(logger, logging.INFO, "upload_phase_started", run_id=run_id, blob_count=len(items))
        upload_outcomes = self._upload_stage.run(items, deadline)
        uploaded = [outcome for outcome in upload_outcomes if outcome.uploaded]
        log_event(
            logger,
            logging.INFO,
            "upload_phase_complete",
            run_id=run_id,
            uploaded=len(uploaded),
            failed=len(upload_outcomes) - len(uploaded),
        )

        collection_outcomes: list[CollectionOutcome] = []
        collection_id = self._config.knowledge_collection_id
        if collection_id and uploaded:
            log_event(
                logger,
                logging.INFO,
                "collection_phase_started",
                run_id=run_id,
                knowledge_collection_id=collection_id,
                files_to_process=len(uploaded),
            )
            collection_outcomes = self._run_collection_phase(uploaded, collection_id, deadline)
            log_event(logger, logging.INFO, "collection_phase_complete", run_id=run_id)
        else:
            log_event(
                logger,
                logging.INFO,
                "collection_phase_skipped",
                run_id=run_id,
                reason="no-files-to-process" if collection_id else "missing-collection-id",
            )

        report = aggregate_run(upload_outcomes, collection_outcomes, datetime.now(timezone.utc))
        log_event(
            logger,
            logging.INFO,
            "sync_complete",
            run_id=run_id,
            total_files=report.total_files,
            uploaded=report.successful,
            failed=report.failed,
            added_to_collection=report.added_to_collection,
            duration_ms=int((self._clock() - started_at) * 1000),
        )
        return report

    def _list_items(self, run_id: str) -> list[SourceItem]:
        try:
            items = self._storage.list_source_items()
        except ListingError:
            raise
        except Exception as exc:
            logger.exception("Unhandled listing failure run_id=%s error=%s", run_id, exc)
            raise ListingError(f"Failed to list source items: {exc}") from exc
        log_event(logger, logging.INFO, "listing_complete", run_id=run_id, blob_count=len(items))
        return items

    def _run_collection_phase(
        self,
        uploaded: list[UploadOutcome],
        collection_id: str,
        deadline: RunDeadline,
    ) -> list[CollectionOutcome]:
        assigner = CollectionAssigner(ingestion=self._ingestion, collection_id=collection_id)
        self._poller.settle(deadline)

        def poll_and_assign(outcome: UploadOutcome) -> CollectionOutcome:
            if not self._poller.wait_until_ready(outcome, deadline):
                return CollectionOutcome(outcome.remote_id, CollectionStatus.NOT_PROCESSED)
            if deadline.expired():
                return CollectionOutcome(outcome.remote_id, CollectionStatus.NOT_PROCESSED)
            return assigner.assign(outcome)

        return run_per_item(
            uploaded,
            poll_and_assign,
            lambda outcome: CollectionOutcome(outcome.remote_id, CollectionStatus.NOT_PROCESSED),
            max_workers=self._config.upload_concurrency,
            deadline=deadline,
            name="collection",
        )


def build_sync_service(
    config: SyncConfig,
    *,
    http_settings: ExternalHTTPSettings | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> SyncService:
    """
    Wire a SyncService with the Vercel Blob and Open WebUI connectors.

    Raises ConfigError before any connector is built if credentials are missing.
    """

    config.validate()
    http_settings = http_settings or get_external_http_settings()
    storage = BlobStorageConnector(
        token=config.blob_read_write_token,
        api_url=config.blob_api_url,
        http_settings=http_settings,
        sleep=sleep,
    )
    ingestion = OpenWebUIClient(
        base_url=config.open_webui_base_url,
        api_key=config.open_webui_api_key,
        http_settings=http_settings,
        sleep=sleep,
    )
    return SyncService(config=config, storage=storage, ingestion=ingestion, sleep=sleep)


def run_sync(config: SyncConfig) -> RunReport:
    """
    Run one sync with the production connectors.
    """

    return build_sync_service(config).run()


def get_sync_runner() -> Callable[[SyncConfig], RunReport]:
    """
    Return the callable that executes one sync run.
    """

    return run_sync
