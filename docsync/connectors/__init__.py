"""
docsync/connectors package marker.
"""

from docsync.connectors.base import ConnectorRequestError, HTTPConnector, IngestionClient, SourceStorage
from docsync.connectors.blob_storage import BlobStorageConnector
from docsync.connectors.open_webui import OpenWebUIClient

__all__ = [
    "BlobStorageConnector",
    "ConnectorRequestError",
    "HTTPConnector",
    "IngestionClient",
    "OpenWebUIClient",
    "SourceStorage",
]
