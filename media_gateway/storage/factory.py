"""Storage backend factory: creates the single active backend from configuration."""

import logging
from typing import Any

from media_gateway import config
from media_gateway.storage.base import StorageBackend
from media_gateway.storage.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

BACKENDS = ("local", "managed-cloud", "s3-cdn")

# Names used by the catalogue's earlier Node service
ALIASES = {
    "supabase": "managed-cloud",
    "cdn": "s3-cdn",
    "wasabi": "s3-cdn",
}


def normalize_backend_name(name: str | None) -> str:
    """Map a configured selector to one of BACKENDS. Raises ConfigurationError."""
    value = (name or "").strip().lower()
    value = ALIASES.get(value, value)
    if value not in BACKENDS:
        raise ConfigurationError(
            f"Unknown storage backend: {name!r}. Supported: {', '.join(BACKENDS)}"
        )
    return value


def create_storage_backend(backend: str | None = None, **overrides: Any) -> StorageBackend:
    """
    Create the storage backend selected by STORAGE_BACKEND (or backend).

    Args:
        backend: Selector; defaults to config.STORAGE_BACKEND.
        overrides: Constructor arguments replacing the configured values.

    Raises:
        ConfigurationError: Unknown selector or missing credentials.
    """
    name = normalize_backend_name(config.STORAGE_BACKEND if backend is None else backend)
    timeout = overrides.pop("timeout", config.STORAGE_CALL_TIMEOUT)

    if name == "local":
        from media_gateway.storage.local_storage import LocalStorage

        kwargs: dict[str, Any] = {
            "root": config.LOCAL_STORAGE_PATH,
            "public_base_url": config.PUBLIC_BASE_URL,
        }
        kwargs.update(overrides)
        storage: StorageBackend = LocalStorage(timeout=timeout, **kwargs)
    elif name == "managed-cloud":
        from media_gateway.storage.supabase_storage import SupabaseStorage

        kwargs = {
            "url": config.SUPABASE_URL,
            "service_role_key": config.SUPABASE_SERVICE_ROLE_KEY,
            "bucket": config.SUPABASE_BUCKET,
            "public_bucket": config.SUPABASE_PUBLIC_BUCKET,
        }
        kwargs.update(overrides)
        storage = SupabaseStorage(timeout=timeout, **kwargs)
    else:
        from media_gateway.storage.s3_storage import S3CdnStorage

        kwargs = {
            "bucket": config.S3_BUCKET,
            "endpoint_url": config.S3_ENDPOINT,
            "region": config.S3_REGION,
            "access_key_id": config.S3_ACCESS_KEY_ID or None,
            "secret_access_key": config.S3_SECRET_ACCESS_KEY or None,
            "cdn_url": config.CDN_URL or None,
            "upload_ttl": config.S3_UPLOAD_URL_TTL,
        }
        kwargs.update(overrides)
        storage = S3CdnStorage(timeout=timeout, **kwargs)

    logger.info("Using %s storage backend", storage.name)
    return storage
