"""
docsync/services/readiness_poller.py

Phase 2a: wait until the ingestion service has extracted content for a file.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from docsync.config import ReadinessPolicy
from docsync.connectors.base import IngestionClient
from docsync.domain.sync_run import UploadOutcome
from docsync.errors import StatusError
from docsync.services.execution import RunDeadline

logger = logging.getLogger(__name__)


class ReadinessPoller:
    """
    Polls processing status under a bounded ``ReadinessPolicy``.

    A file is ready only when processing has completed and extracted content
    is non-empty. Not-ready checks are retried; a failed status call ends
    polling for that file.
    """

    def __init__(
        self,
        *,
        ingestion: IngestionClient,
        policy: ReadinessPolicy,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._ingestion = ingestion
        self._policy = policy
        self._sleep = sleep

    def settle(self, deadline: RunDeadline) -> None:
        """
        Apply the one-off settling delay before the first status check of a batch.
        """

        logger.debug(
            "Waiting for ingestion processing window delay_seconds=%s",
            self._policy.settling_delay_seconds,
        )
        deadline.sleep(self._policy.settling_delay_seconds, self._sleep)

    def wait_until_ready(self, outcome: UploadOutcome, deadline: RunDeadline) -> bool:
        max_attempts = max(1, self._policy.max_attempts)
        for attempt in range(1, max_attempts + 1):
            if deadline.expired():
                logger.warning(
                    "Run deadline reached while polling pathname=%s attempt=%s",
                    outcome.path,
                    attempt,
                )
                return False

            try:
                status = self._ingestion.get_file_status(outcome.remote_id)
            except StatusError as exc:
                logger.error(
                    "Failed to check processing status pathname=%s attempt=%s error=%s",
                    outcome.path,
                    attempt,
                    exc,
                )
                return False
            except Exception as exc:
                logger.exception(
                    "Unhandled status check failure pathname=%s attempt=%s error=%s",
                    outcome.path,
                    attempt,
                    exc,
                )
                return False

            logger.debug(
                "Checked file processing status pathname=%s attempt=%s processed=%s has_content=%s",
                outcome.path,
                attempt,
                status.processed,
                status.has_content,
            )
            if status.is_ready:
                logger.info("File ready for collection pathname=%s attempt=%s", outcome.path, attempt)
                return True

            if attempt < max_attempts and not deadline.sleep(
                self._policy.inter_attempt_delay_seconds, self._sleep
            ):
                return False

        logger.warning(
            "File not ready for collection pathname=%s attempts=%s",
            outcome.path,
            max_attempts,
        )
        return False
