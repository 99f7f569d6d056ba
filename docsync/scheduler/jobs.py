"""
docsync/scheduler/jobs.py

APScheduler-based periodic document sync.

The job is registered only when ``SYNC_SCHEDULE_CRON`` holds a 5-field
crontab expression (UTC), e.g. ``0 * * * *`` for hourly. Without it the
scheduler starts empty and syncs run only through the HTTP trigger or CLI.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from docsync.config import SchedulerSettings, SyncConfig, get_scheduler_settings, get_sync_config
from docsync.domain.sync_run import RunReport
from docsync.errors import SyncFatalError
from docsync.services.sync_service import run_sync

logger = logging.getLogger(__name__)

SCHEDULED_SYNC_JOB_ID = "scheduled_sync"


def run_scheduled_sync(
    runner: Callable[[SyncConfig], RunReport] = run_sync,
) -> RunReport | None:
    """
    Run one sync from environment configuration.

    Fatal errors are logged and swallowed so the scheduler keeps its next run.
    """

    logger.info("Scheduler: scheduled_sync starting")
    try:
        report = runner(get_sync_config())
    except SyncFatalError as exc:
        logger.error("Scheduler: scheduled_sync aborted: %s", exc)
        return None

    logger.info(
        "Scheduler: scheduled_sync complete total=%s uploaded=%s failed=%s added=%s",
        report.total_files,
        report.successful,
        report.failed,
        report.added_to_collection,
    )
    return report


def build_scheduler(settings: SchedulerSettings | None = None) -> BackgroundScheduler:
    """
    Build the scheduler and register the sync job when a schedule is set.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    """

    settings = settings or get_scheduler_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    if not settings.cron:
        logger.info("Scheduler: SYNC_SCHEDULE_CRON not set, scheduled sync disabled")
        return scheduler

    scheduler.add_job(
        run_scheduled_sync,
        trigger=CronTrigger.from_crontab(settings.cron, timezone="UTC"),
        id=SCHEDULED_SYNC_JOB_ID,
        name="Scheduled document sync",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=3600,
    )
    return scheduler
