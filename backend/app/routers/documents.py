"""Proposal document upload: hands bytes to object storage and returns its URL."""
import base64
import binascii
import logging
from fastapi import APIRouter, Depends, status

from app.dependencies import get_storage
from app.schemas.proposal import DocumentOut, DocumentUpload
from app.services.errors import ValidationError
from app.services.storage import ObjectStorage

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=DocumentOut, status_code=status.HTTP_201_CREATED)
def upload_document(payload: DocumentUpload, storage: ObjectStorage = Depends(get_storage)):
    """Store a proposal document; the returned URL is what a proposal submission references."""
    try:
        data = base64.b64decode(payload.content_base64, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Document content is not valid base64", {"content_base64": "invalid"})
    stored = storage.upload(data, payload.content_type, payload.filename)
    return DocumentOut(url=stored.url, size=stored.size)
