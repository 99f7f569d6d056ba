from __future__ import annotations

import json
import logging

import pytest

from docsync.logging_utils import log_event


def test_log_event_emits_json_with_run_id(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("docsync.test")

    with caplog.at_level(logging.INFO, logger="docsync.test"):
        log_event(logger, logging.INFO, "sync_started", run_id="abc", blob_count=3)

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload == {"event": "sync_started", "route": "sync-documents", "run_id": "abc", "blob_count": 3}
