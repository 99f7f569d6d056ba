"""
docsync/api/dependencies.py

Shared FastAPI dependencies for the sync trigger.
"""

from __future__ import annotations

import hmac
import logging

from fastapi import Header

from docsync.config import get_cron_secret

logger = logging.getLogger(__name__)


def verify_trigger_authorization(authorization: str | None = Header(default=None)) -> bool:
    """
    True when the request carries ``Bearer <CRON_SECRET>``.

    Always False while no secret is configured.
    """

    cron_secret = get_cron_secret()
    if not cron_secret or not authorization:
        if not cron_secret:
            logger.warning("CRON_SECRET is not configured; rejecting sync trigger.")
        return False
    return hmac.compare_digest(authorization.strip(), f"Bearer {cron_secret}")
