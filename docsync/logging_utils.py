"""
docsync/logging_utils.py

Structured logging helpers for sync runs.
"""

from __future__ import annotations

import json
import logging
from typing import Any

SYNC_ROUTE = "sync-documents"


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    *,
    run_id: str | None = None,
    **fields: Any,
) -> None:
    """
    Emit one sync lifecycle event as compact JSON, tagged with the run id.
    """

    payload: dict[str, Any] = {"event": event, "route": SYNC_ROUTE}
    if run_id is not None:
        payload["run_id"] = run_id
    payload.update(fields)
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
