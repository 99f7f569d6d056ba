"""
docsync/connectors/open_webui.py

Open WebUI client for file upload, processing status and knowledge assignment.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from docsync.config import ExternalHTTPSettings
from docsync.connectors.base import ConnectorRequestError, HTTPConnector, IngestionClient
from docsync.domain.sync_run import FileStatus
from docsync.errors import AssignError, StatusError, UploadError

logger = logging.getLogger(__name__)

PROCESSING_COMPLETED = "completed"


class OpenWebUIClient(HTTPConnector, IngestionClient):
    """
    Ingestion client for the Open WebUI files and knowledge APIs.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(source="open_webui", http_settings=http_settings, session=session, **kwargs)
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key

    def upload_file(self, filename: str, mime_type: str, payload: bytes | str) -> str:
        try:
            body = self._request_json(
                method="POST",
                url=f"{self._base_url}/api/v1/files/",
                headers=self._headers({"Accept": "application/json"}),
                files={"file": (filename, payload, mime_type)},
                retry=False,
            )
        except ConnectorRequestError as exc:
            raise UploadError(f"Failed to upload file: {exc}") from exc

        file_id = body.get("id") if isinstance(body, dict) else None
        if not file_id:
            raise UploadError("Failed to get file ID from upload response")
        return str(file_id)

    def get_file_status(self, remote_id: str) -> FileStatus:
        try:
            body = self._request_json(
                method="GET",
                url=f"{self._base_url}/api/v1/files/{remote_id}",
                headers=self._headers(),
                retry=False,
            )
        except ConnectorRequestError as exc:
            raise StatusError(f"Failed to check processing status: {exc}") from exc

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            data = {}
        content = data.get("content")
        return FileStatus(
            processed=data.get("status") == PROCESSING_COMPLETED,
            has_content=isinstance(content, str) and bool(content.strip()),
        )

    def add_file_to_collection(self, collection_id: str, remote_id: str) -> None:
        try:
            self._request(
                method="POST",
                url=f"{self._base_url}/api/v1/knowledge/{collection_id}/file/add",
                headers=self._headers({"Content-Type": "application/json"}),
                json={"file_id": remote_id},
                retry=False,
            )
        except ConnectorRequestError as exc:
            raise AssignError(f"Failed to add file to knowledge collection: {exc}") from exc

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}", **(extra or {})}
