"""Storage API: negotiate uploads, ingest local uploads, sign reads, delete objects."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from media_gateway.core.auth import require_admin
from media_gateway.core.deps import get_storage
from media_gateway.core.upload_validation import validate_content_type, validate_upload
from media_gateway.schemas.storage import (
    DeleteRequest,
    DeleteResponse,
    LocalUploadResponse,
    SignedUrlItem,
    SignedUrlRequest,
    SignedUrlResponse,
    SignedUrlsRequest,
    UploadUrlRequest,
    UploadUrlResponse,
)
from media_gateway.services.cleanup import cascade_delete, delete_object
from media_gateway.services.uploads import ingest_local_upload, request_upload
from media_gateway.services.urls import resolve_read_url, resolve_read_urls
from media_gateway.storage.base import StorageBackend
from media_gateway.storage.exceptions import (
    DeleteError,
    IngestionError,
    InvalidKeyError,
    NegotiationError,
)
from media_gateway.storage.local_storage import LocalStorage

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/storage",
    tags=["storage"],
    dependencies=[Depends(require_admin)],
)

Storage = Annotated[StorageBackend, Depends(get_storage)]


@router.post("/upload-url", response_model=UploadUrlResponse)
async def create_upload_url(body: UploadUrlRequest, storage: Storage) -> UploadUrlResponse:
    """
    Derive a storage key and return where the client should upload the file.
    The client then PUTs to uploadUrl (S3, Supabase with token) or POSTs
    multipart file + key to uploadUrl (local backend).
    """
    if not body.fileName or not body.contentType:
        raise HTTPException(status_code=400, detail="fileName and contentType are required")
    err = validate_content_type(body.fileName, body.contentType)
    if err:
        raise HTTPException(status_code=400, detail=err)
    try:
        target = await request_upload(
            storage,
            file_name=body.fileName,
            content_type=body.contentType,
            entity_id=body.entityId,
            variant_id=body.variantId,
        )
    except NegotiationError as e:
        logger.error("Generate upload URL error: %s", e)
        raise HTTPException(status_code=502, detail="Failed to generate upload URL") from e
    return UploadUrlResponse(**target.as_dict(), backend=storage.name)


@router.post("/upload-local", response_model=LocalUploadResponse)
async def upload_local(
    storage: Storage,
    key: Annotated[str, Form()],
    file: UploadFile = File(...),
) -> LocalUploadResponse:
    """Receive the bytes for a key negotiated with the local backend."""
    if not isinstance(storage, LocalStorage):
        raise HTTPException(status_code=404, detail="Local uploads are not enabled")
    content = await file.read()
    _, err = validate_upload(file.filename or key, file.content_type, len(content))
    if err:
        raise HTTPException(status_code=400, detail=err)
    try:
        public_url = await ingest_local_upload(storage, key, content)
    except InvalidKeyError as e:
        raise HTTPException(status_code=400, detail="Invalid storage key") from e
    except IngestionError as e:
        logger.error("Local upload error: %s", e)
        raise HTTPException(status_code=500, detail="Failed to upload file locally") from e
    return LocalUploadResponse(publicUrl=public_url, key=key, message="File uploaded successfully")


@router.delete("/delete", response_model=DeleteResponse, response_model_exclude_none=True)
async def delete_images(body: DeleteRequest, storage: Storage) -> DeleteResponse:
    """
    Delete one object ({canonicalUrl}) or cascade over many ({canonicalUrls}).
    A single delete reports failure; a batch is best-effort and always succeeds.
    """
    if body.canonicalUrls is not None:
        report = await cascade_delete(storage, body.canonicalUrls)
        return DeleteResponse(
            message=f"Deleted {len(report.deleted)} of {len(body.canonicalUrls)} images",
            deleted=report.deleted,
            failed=report.failed,
            skipped=report.skipped,
        )
    if not body.canonicalUrl:
        raise HTTPException(status_code=400, detail="canonicalUrl or canonicalUrls is required")
    try:
        await delete_object(storage, body.canonicalUrl)
    except InvalidKeyError as e:
        raise HTTPException(status_code=400, detail="Invalid image URL format") from e
    except DeleteError as e:
        logger.error("Delete image error: %s", e)
        raise HTTPException(status_code=502, detail="Failed to delete image") from e
    return DeleteResponse(message="Image deleted successfully")


@router.post("/signed-url", response_model=SignedUrlResponse)
async def signed_url(body: SignedUrlRequest, storage: Storage) -> SignedUrlResponse:
    """Readable URL for one stored image; falls back to the stored URL."""
    resolved = await resolve_read_url(storage, body.url)
    return SignedUrlResponse(originalUrl=body.url, signedUrl=resolved)


@router.post("/signed-urls", response_model=list[SignedUrlItem])
async def signed_urls(body: SignedUrlsRequest, storage: Storage) -> list[SignedUrlItem]:
    """Readable URLs for a batch; each entry succeeds or fails on its own."""
    resolved = await resolve_read_urls(storage, body.urls)
    return [
        SignedUrlItem(originalUrl=r.original_url, signedUrl=r.signed_url, error=r.error)
        for r in resolved
    ]
