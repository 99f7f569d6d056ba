"""
docsync/connectors/blob_storage.py

Vercel Blob connector: lists stored blobs and downloads their content.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from docsync.config import ExternalHTTPSettings
from docsync.connectors.base import ConnectorRequestError, HTTPConnector, SourceStorage
from docsync.domain.sync_run import SourceItem
from docsync.errors import FetchError, ListingError

logger = logging.getLogger(__name__)

BLOB_API_VERSION = "7"
LIST_PAGE_SIZE = 1000


class BlobStorageConnector(HTTPConnector, SourceStorage):
    """
    Source storage backed by the Vercel Blob REST API.
    """

    def __init__(
        self,
        *,
        token: str,
        api_url: str,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(source="vercel_blob", http_settings=http_settings, session=session, **kwargs)
        self._token = token
        self._api_url = api_url.rstrip("/")

    def list_source_items(self) -> list[SourceItem]:
        items: list[SourceItem] = []
        cursor: str | None = None
        while True:
            params: dict[str, Any] = {"limit": LIST_PAGE_SIZE}
            if cursor:
                params["cursor"] = cursor
            try:
                payload = self._request_json(
                    method="GET",
                    url=self._api_url,
                    params=params,
                    headers={
                        "Authorization": f"Bearer {self._token}",
                        "x-api-version": BLOB_API_VERSION,
                    },
                )
            except ConnectorRequestError as exc:
                raise ListingError(f"Failed to list blobs: {exc}") from exc

            if not isinstance(payload, dict):
                raise ListingError("Failed to list blobs: unexpected response shape.")

            for index, blob in enumerate(payload.get("blobs") or []):
                item = self._normalize_blob(blob)
                if item is None:
                    logger.warning("Skipping malformed blob entry index=%s", index)
                    continue
                items.append(item)

            cursor = payload.get("cursor")
            if not payload.get("hasMore") or not cursor:
                break

        logger.info("Blob listing complete count=%s", len(items))
        return items

    def fetch_content(self, content_ref: str) -> bytes:
        try:
            response = self._request(method="GET", url=content_ref)
        except ConnectorRequestError as exc:
            raise FetchError(f"Failed to fetch blob content: {exc}") from exc
        return response.content

    def _normalize_blob(self, blob: Any) -> SourceItem | None:
        if not isinstance(blob, dict):
            return None

        pathname = (blob.get("pathname") or "").strip()
        url = (blob.get("url") or "").strip()
        uploaded_raw = (blob.get("uploadedAt") or "").strip()
        if not pathname or not url or not uploaded_raw:
            return None

        try:
            last_modified = self.parse_iso_datetime(uploaded_raw)
            size = max(0, int(blob.get("size") or 0))
        except (TypeError, ValueError):
            return None

        return SourceItem(
            path=pathname,
            content_ref=url,
            size_bytes=size,
            last_modified=last_modified,
        )
