"""
docsync/services package marker.
"""

from docsync.services.collection_assigner import CollectionAssigner
from docsync.services.content_classifier import classify, classify_content
from docsync.services.execution import RunDeadline, run_per_item
from docsync.services.readiness_poller import ReadinessPoller
from docsync.services.run_aggregator import aggregate_run
from docsync.services.sync_service import SyncService, build_sync_service, run_sync
from docsync.services.upload_stage import UploadStage

__all__ = [
    "CollectionAssigner",
    "ReadinessPoller",
    "RunDeadline",
    "SyncService",
    "UploadStage",
    "aggregate_run",
    "build_sync_service",
    "classify",
    "classify_content",
    "run_per_item",
    "run_sync",
]
