"""
docsync/api/routers/sync_documents.py

HTTP trigger for the Vercel Blob to Open WebUI document sync.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from docsync.api.dependencies import verify_trigger_authorization
from docsync.config import SyncConfig, get_sync_config
from docsync.domain.sync_run import RunReport
from docsync.errors import SyncFatalError
from docsync.schemas.sync import (
    SyncFailureResponse,
    SyncReportResponse,
    SyncServiceInfoResponse,
    UnauthorizedResponse,
)
from docsync.services.sync_service import get_sync_runner

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sync"])

SYNC_ENDPOINT = "/api/sync-documents"


@router.post(
    SYNC_ENDPOINT,
    response_model=SyncReportResponse,
    summary="Sync documents from Vercel Blob to Open WebUI",
    description=(
        "Uploads every stored document to Open WebUI, then adds files that finished "
        "processing to the configured knowledge collection."
    ),
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": UnauthorizedResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": SyncFailureResponse},
    },
)
def sync_documents(
    authorized: bool = Depends(verify_trigger_authorization),
    config: SyncConfig = Depends(get_sync_config),
    runner: Callable[[SyncConfig], RunReport] = Depends(get_sync_runner),
) -> SyncReportResponse | JSONResponse:
    """
    Run one sync and return the consolidated report.
    """

    if not authorized:
        logger.warning("Unauthorized sync attempt blocked")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=UnauthorizedResponse().model_dump(),
        )

    try:
        report = runner(config)
    except SyncFatalError as exc:
        logger.error("Sync operation failed error=%s", exc)
        return _failure_response(str(exc), exc.failed_at)
    except Exception as exc:
        logger.exception("Unhandled sync failure error=%s", exc)
        return _failure_response(str(exc) or "Unknown error", datetime.now(timezone.utc))

    return SyncReportResponse.from_report(report)


@router.get(SYNC_ENDPOINT, response_model=SyncServiceInfoResponse)
def sync_service_info() -> SyncServiceInfoResponse:
    """
    Describe the sync endpoint for discovery.
    """

    return SyncServiceInfoResponse(
        message="Vercel Blob to Open WebUI Sync Service",
        endpoint=SYNC_ENDPOINT,
        method="POST",
        description="Syncs documents from Vercel Blob storage to Open WebUI Knowledge base",
        last_updated=datetime.now(timezone.utc),
    )


def _failure_response(details: str, failed_at: datetime) -> JSONResponse:
    payload = SyncFailureResponse(details=details, timestamp=failed_at)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=payload.model_dump(mode="json"),
    )
