"""Object storage for proposal documents.

The workflow never reads document contents; it only keeps the URL the
storage returns. ``LocalObjectStorage`` writes to a directory served under
``STORAGE_BASE_URL``.
"""
import logging
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from app.config import settings
from app.services.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredObject:
    key: str
    url: str
    size: int


class ObjectStorage(Protocol):
    def upload(self, data: bytes, content_type: str, filename: str | None = None) -> StoredObject: ...


class LocalObjectStorage:
    def __init__(self, root_dir: str, base_url: str):
        self._root = Path(root_dir)
        self._base_url = base_url.rstrip("/")

    def upload(self, data: bytes, content_type: str, filename: str | None = None) -> StoredObject:
        allowed = [t.strip() for t in settings.ALLOWED_DOCUMENT_TYPES.split(",") if t.strip()]
        if content_type not in allowed:
            raise ValidationError(f"Unsupported document type: {content_type}", {"content_type": "unsupported"})
        if not data:
            raise ValidationError("Document is empty", {"content": "empty"})
        if len(data) > settings.MAX_DOCUMENT_BYTES:
            raise ValidationError(
                f"Document exceeds {settings.MAX_DOCUMENT_BYTES} bytes", {"content": "too_large"}
            )

        suffix = Path(filename).suffix if filename else (mimetypes.guess_extension(content_type) or "")
        key = f"proposals/{uuid.uuid4()}{suffix}"
        path = self._root / key
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info("Stored proposal document %s (%d bytes)", key, len(data))
        return StoredObject(key=key, url=f"{self._base_url}/{key}", size=len(data))
