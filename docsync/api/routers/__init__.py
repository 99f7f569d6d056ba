"""
docsync/api/routers package marker.
"""

from docsync.api.routers.sync_documents import router as sync_documents_router

__all__ = [
    "sync_documents_router",
]
