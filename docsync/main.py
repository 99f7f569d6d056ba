from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _report_missing_env() -> None:
    """
    Log configuration gaps at startup.

    Missing sync credentials do not stop the API; each run reports them as a
    fatal configuration error instead.
    """

    from docsync.config import get_cron_secret, get_sync_config

    log = logging.getLogger(__name__)
    missing = get_sync_config().missing_fields()
    if missing:
        log.warning("Sync configuration incomplete, missing: %s", ", ".join(missing))
    if not get_cron_secret():
        log.warning("CRON_SECRET is not set; POST /api/sync-documents will reject every request.")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Start the sync scheduler on boot; shut it down on exit."""
    from docsync.scheduler.jobs import build_scheduler

    scheduler = build_scheduler()
    scheduler.start()
    logging.getLogger(__name__).info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        logging.getLogger(__name__).info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()
    _report_missing_env()

    application = FastAPI(
        title="Document Sync API",
        version="1.0.0",
        description="Syncs documents from Vercel Blob storage to an Open WebUI knowledge base.",
        lifespan=_lifespan,
    )

    from docsync.api.routers import sync_documents_router

    application.include_router(sync_documents_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
