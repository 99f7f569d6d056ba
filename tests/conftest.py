"""
Shared in-memory fakes for sync tests. No network, no real sleeping.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any

import pytest
import requests

from docsync.config import ReadinessPolicy, SyncConfig
from docsync.connectors.base import IngestionClient, SourceStorage
from docsync.domain.sync_run import FileStatus, SourceItem
from docsync.errors import AssignError, FetchError, StatusError, UploadError

UPLOADED_AT = datetime(2025, 10, 29, 22, 12, 47, tzinfo=timezone.utc)

READY = FileStatus(processed=True, has_content=True)
PENDING = FileStatus(processed=False, has_content=False)


def make_item(path: str, size: int = 100) -> SourceItem:
    return SourceItem(
        path=path,
        content_ref=f"https://blob.example/{path}",
        size_bytes=size,
        last_modified=UPLOADED_AT,
    )


class FakeStorage(SourceStorage):
    def __init__(
        self,
        items: list[SourceItem],
        *,
        failing_refs: set[str] | None = None,
        listing_error: Exception | None = None,
    ) -> None:
        self.items = items
        self.failing_refs = failing_refs or set()
        self.listing_error = listing_error
        self.list_calls = 0
        self.fetched: list[str] = []

    def list_source_items(self) -> list[SourceItem]:
        self.list_calls += 1
        if self.listing_error is not None:
            raise self.listing_error
        return list(self.items)

    def fetch_content(self, content_ref: str) -> bytes:
        self.fetched.append(content_ref)
        if content_ref in self.failing_refs:
            raise FetchError("Failed to fetch blob content: Not Found")
        return f"content of {content_ref}".encode("utf-8")


class FakeIngestion(IngestionClient):
    """
    ``statuses`` maps a filename to the sequence of results its status checks
    return; an Exception entry is raised. The last entry repeats.
    """

    def __init__(
        self,
        *,
        failing_uploads: set[str] | None = None,
        statuses: dict[str, list[FileStatus | Exception]] | None = None,
        failing_assignments: set[str] | None = None,
    ) -> None:
        self.failing_uploads = failing_uploads or set()
        self.statuses = statuses or {}
        self.failing_assignments = failing_assignments or set()
        self.uploads: list[tuple[str, str, bytes | str]] = []
        self.status_calls: dict[str, int] = defaultdict(int)
        self.assignments: list[tuple[str, str]] = []
        self._ids: dict[str, str] = {}
        self._lock = threading.Lock()

    def remote_id_for(self, filename: str) -> str:
        return self._ids[filename]

    def upload_file(self, filename: str, mime_type: str, payload: bytes | str) -> str:
        if filename in self.failing_uploads:
            raise UploadError("Failed to get file ID from upload response")
        with self._lock:
            self.uploads.append((filename, mime_type, payload))
            remote_id = f"file-{len(self._ids) + 1}"
            self._ids[filename] = remote_id
        return remote_id

    def get_file_status(self, remote_id: str) -> FileStatus:
        filename = next(name for name, rid in self._ids.items() if rid == remote_id)
        with self._lock:
            index = self.status_calls[filename]
            self.status_calls[filename] += 1
        script = self.statuses.get(filename, [READY])
        result = script[min(index, len(script) - 1)]
        if isinstance(result, Exception):
            raise result
        return result

    def add_file_to_collection(self, collection_id: str, remote_id: str) -> None:
        filename = next(name for name, rid in self._ids.items() if rid == remote_id)
        with self._lock:
            self.assignments.append((collection_id, remote_id))
        if filename in self.failing_assignments:
            raise AssignError("Failed to add file to knowledge collection: open_webui: HTTP 400")


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        *,
        json_body: Any = None,
        content: bytes = b"",
        reason: str = "OK",
    ) -> None:
        self.status_code = status_code
        self._json_body = json_body
        self.content = content
        self.reason = reason

    def json(self) -> Any:
        if self._json_body is None:
            raise ValueError("No JSON body")
        return self._json_body

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} {self.reason}", response=self)


class FakeSession:
    """
    Replays queued responses (or raises queued exceptions) in call order.
    """

    def __init__(self, responses: list[FakeResponse | Exception]) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def request(self, **kwargs: Any) -> FakeResponse:
        self.calls.append(kwargs)
        result = self._responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def make_config(**overrides: Any) -> SyncConfig:
    values: dict[str, Any] = {
        "blob_read_write_token": "blob-token",
        "open_webui_base_url": "https://webui.example",
        "open_webui_api_key": "webui-key",
        "knowledge_collection_id": None,
        "upload_concurrency": 4,
        "readiness": ReadinessPolicy(),
    }
    values.update(overrides)
    return SyncConfig(**values)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
