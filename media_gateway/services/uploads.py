"""Upload negotiation and local ingestion."""

import logging

from media_gateway.storage.base import StorageBackend, UploadTarget
from media_gateway.storage.exceptions import ConfigurationError, InvalidKeyError
from media_gateway.storage.keys import current_timestamp_ms, derive_key, is_storage_key
from media_gateway.storage.local_storage import LocalStorage

logger = logging.getLogger(__name__)


async def request_upload(
    storage: StorageBackend,
    file_name: str,
    content_type: str,
    entity_id: str | None,
    variant_id: str | None,
    timestamp_ms: int | None = None,
) -> UploadTarget:
    """
    Derive a fresh key for the file and ask the active backend for an upload target.
    The timestamp is read here, at negotiation time, unless the caller pins one.
    NegotiationError from the backend propagates to the caller.
    """
    if timestamp_ms is None:
        timestamp_ms = current_timestamp_ms()
    key = derive_key(entity_id, variant_id, timestamp_ms, file_name)
    logger.info("Negotiating %s upload for %s (%s)", storage.name, key, content_type)
    return await storage.negotiate_upload(key, content_type)


async def ingest_local_upload(storage: StorageBackend, key: str, content: bytes) -> str:
    """Second phase of a local upload: write the bytes for a negotiated key."""
    if not isinstance(storage, LocalStorage):
        raise ConfigurationError(f"Local ingestion is not available with the {storage.name} backend")
    if not is_storage_key(key):
        raise InvalidKeyError(f"Invalid storage key: {key!r}")
    return await storage.ingest(key, content)
