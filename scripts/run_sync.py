"""
Run one document sync from the CLI.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import os

from docsync.config import get_sync_config
from docsync.errors import SyncFatalError
from docsync.schemas.sync import SyncFailureResponse, SyncReportResponse
from docsync.services.sync_service import run_sync


def main() -> int:
    parser = argparse.ArgumentParser(description="Sync Vercel Blob documents into Open WebUI.")
    parser.add_argument(
        "--collection-id",
        dest="collection_id",
        default=None,
        help="Knowledge collection id; overrides KNOWLEDGE_COLLECTION_ID.",
    )
    parser.add_argument(
        "--timeout",
        dest="timeout",
        type=float,
        default=None,
        help="Overall run deadline in seconds; overrides SYNC_RUN_TIMEOUT_SECONDS.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    config = get_sync_config()
    overrides = {}
    if args.collection_id:
        overrides["knowledge_collection_id"] = args.collection_id
    if args.timeout is not None and args.timeout > 0:
        overrides["run_timeout_seconds"] = args.timeout
    if overrides:
        config = dataclasses.replace(config, **overrides)

    try:
        report = run_sync(config)
    except SyncFatalError as exc:
        failure = SyncFailureResponse(details=str(exc), timestamp=exc.failed_at)
        print(json.dumps(failure.model_dump(mode="json"), indent=2))
        return 1

    payload = SyncReportResponse.from_report(report).model_dump(mode="json", by_alias=True)
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
