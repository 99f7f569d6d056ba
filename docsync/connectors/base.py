"""
docsync/connectors/base.py

Connector abstractions for source storage and the ingestion service,
plus shared HTTP mechanics.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import requests

from docsync.config import ExternalHTTPSettings
from docsync.domain.sync_run import FileStatus, SourceItem

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class ConnectorRequestError(RuntimeError):
    """
    Raised when a connector request fails, after retries where allowed.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SourceStorage(ABC):
    """
    Object storage that enumerates source items and serves their bytes.
    """

    @abstractmethod
    def list_source_items(self) -> list[SourceItem]:
        """
        Return every available source item. Raises ListingError.
        """

    @abstractmethod
    def fetch_content(self, content_ref: str) -> bytes:
        """
        Download raw bytes for one item. Raises FetchError.
        """


class IngestionClient(ABC):
    """
    Downstream document-ingestion service.
    """

    @abstractmethod
    def upload_file(self, filename: str, mime_type: str, payload: bytes | str) -> str:
        """
        Create a downstream file and return its id. Raises UploadError.
        """

    @abstractmethod
    def get_file_status(self, remote_id: str) -> FileStatus:
        """
        Return processing state for one file. Raises StatusError.
        """

    @abstractmethod
    def add_file_to_collection(self, collection_id: str, remote_id: str) -> None:
        """
        Attach a file to a collection. Raises AssignError.
        """


class HTTPConnector:
    """
    Shared request execution with exponential backoff for idempotent calls.

    Stage workers call one connector from several threads, and
    ``requests.Session`` is not thread-safe, so each thread gets its own
    session. An injected ``session`` is used as-is by every thread.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.source = source
        self._shared_session = session
        self._local = threading.local()
        self._sleep = sleep
        self._timeout_seconds = http_settings.timeout_seconds
        self._max_retries = http_settings.max_retries
        self._backoff_initial_seconds = http_settings.backoff_initial_seconds
        self._backoff_multiplier = http_settings.backoff_multiplier

    def _thread_session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
        return session

    def _request_json(
        self,
        *,
        method: str,
        url: str,
        retry: bool = True,
        **kwargs: Any,
    ) -> Any:
        """
        Execute an HTTP request and return parsed JSON.
        """

        response = self._request(method=method, url=url, retry=retry, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise ConnectorRequestError(
                f"{self.source}: response was not valid JSON.",
                status_code=response.status_code,
            ) from exc

    def _request(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json: Any = None,
        files: dict[str, Any] | None = None,
        retry: bool = True,
    ) -> requests.Response:
        """
        Execute an HTTP request.

        With ``retry`` set, timeouts, connection errors and retryable status
        codes are retried with exponential backoff. Without it the first
        failure is raised. Non-idempotent calls must pass ``retry=False``.
        """

        max_retries = self._max_retries if retry else 0
        last_error: Exception | None = None
        last_status: int | None = None
        for attempt in range(max_retries + 1):
            try:
                response = self._thread_session().request(
                    method=method,
                    url=url,
                    params=params,
                    headers=headers,
                    json=json,
                    files=files,
                    timeout=self._timeout_seconds,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable HTTP status code: {response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return response
            except requests.HTTPError as exc:
                last_error = exc
                status_code = exc.response.status_code if exc.response is not None else None
                last_status = status_code
                if status_code not in RETRYABLE_STATUS_CODES:
                    reason = exc.response.reason if exc.response is not None else None
                    logger.error(
                        "Connector request failed source=%s status=%s url=%s error=%s",
                        self.source,
                        status_code,
                        url,
                        exc,
                    )
                    raise ConnectorRequestError(
                        f"{self.source}: HTTP {status_code} {reason or ''}".rstrip(),
                        status_code=status_code,
                    ) from exc
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc
                last_status = None

            if attempt >= max_retries:
                break

            backoff_seconds = self._backoff_initial_seconds * (self._backoff_multiplier**attempt)
            logger.warning(
                "Connector request retry source=%s attempt=%s/%s wait_seconds=%.2f url=%s",
                self.source,
                attempt + 1,
                max_retries,
                backoff_seconds,
                url,
            )
            self._sleep(backoff_seconds)

        logger.error(
            "Connector request gave up source=%s url=%s error=%s",
            self.source,
            url,
            last_error,
        )
        raise ConnectorRequestError(
            f"{self.source}: request failed: {last_error}",
            status_code=last_status,
        ) from last_error

    @staticmethod
    def parse_iso_datetime(value: str) -> datetime:
        """
        Parse an ISO datetime string into a timezone-aware datetime.
        """

        normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
        parsed = datetime.fromisoformat(normalized)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed
