"""
docsync/services/content_classifier.py

Extension-based MIME type and transfer-encoding classification.
"""

from __future__ import annotations

from docsync.domain.sync_run import ClassifiedContent, ContentClassification, TransferEncoding

DEFAULT_MIME_TYPE = "application/octet-stream"

_WORD = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
_SPREADSHEET = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
_PRESENTATION = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

_EXTENSION_TABLE: dict[str, ContentClassification] = {
    "md": ContentClassification("text/markdown", TransferEncoding.TEXT),
    "markdown": ContentClassification("text/markdown", TransferEncoding.TEXT),
    "txt": ContentClassification("text/plain", TransferEncoding.TEXT),
    "json": ContentClassification("application/json", TransferEncoding.TEXT),
    "html": ContentClassification("text/html", TransferEncoding.TEXT),
    "pdf": ContentClassification("application/pdf", TransferEncoding.BINARY),
    "doc": ContentClassification(_WORD, TransferEncoding.BINARY),
    "docx": ContentClassification(_WORD, TransferEncoding.BINARY),
    "xls": ContentClassification(_SPREADSHEET, TransferEncoding.BINARY),
    "xlsx": ContentClassification(_SPREADSHEET, TransferEncoding.BINARY),
    "ppt": ContentClassification(_PRESENTATION, TransferEncoding.BINARY),
    "pptx": ContentClassification(_PRESENTATION, TransferEncoding.BINARY),
    "jpg": ContentClassification("image/jpeg", TransferEncoding.BINARY),
    "jpeg": ContentClassification("image/jpeg", TransferEncoding.BINARY),
    "png": ContentClassification("image/png", TransferEncoding.BINARY),
    "gif": ContentClassification("image/gif", TransferEncoding.BINARY),
}

_DEFAULT = ContentClassification(DEFAULT_MIME_TYPE, TransferEncoding.BINARY)


def file_extension(path: str) -> str:
    """
    Lower-cased text after the last dot of the final path segment, or "".
    """

    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def classify(path: str) -> ContentClassification:
    """
    Map a file path to its MIME type and transfer encoding. Total: unknown
    extensions fall back to binary ``application/octet-stream``.
    """

    return _EXTENSION_TABLE.get(file_extension(path), _DEFAULT)


def classify_content(path: str, raw: bytes) -> ClassifiedContent:
    classification = classify(path)
    payload: bytes | str = raw
    if classification.transfer == TransferEncoding.TEXT:
        payload = raw.decode("utf-8", errors="replace")
    return ClassifiedContent(
        mime_type=classification.mime_type,
        transfer=classification.transfer,
        payload=payload,
    )
