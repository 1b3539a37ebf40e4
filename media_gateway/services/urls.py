"""Resolve stored canonical URLs into URLs a browser can read."""

import logging
from dataclasses import dataclass

from media_gateway.config import SIGNED_URL_TTL, STORAGE_BATCH_CONCURRENCY
from media_gateway.services.batching import gather_bounded
from media_gateway.storage.base import StorageBackend
from media_gateway.storage.keys import extract_key

logger = logging.getLogger(__name__)


@dataclass
class ResolvedUrl:
    """One entry of a batch resolution. On failure signed_url is the original."""

    original_url: str
    signed_url: str
    error: str | None = None


async def _sign(storage: StorageBackend, url: str, ttl_seconds: int) -> str:
    key = extract_key(url)
    if key is None:
        # Legacy or foreign URL: render it as-is.
        return url
    return await storage.sign_get_url(url, key, ttl_seconds)


async def resolve_read_url(
    storage: StorageBackend,
    url: str,
    ttl_seconds: int = SIGNED_URL_TTL,
) -> str:
    """
    Return a signed URL for url, or url unchanged when it has no storage key,
    the backend serves it publicly, or signing fails. Never raises StorageError.
    """
    try:
        return await _sign(storage, url, ttl_seconds)
    except Exception as exc:
        logger.warning("Failed to generate signed URL for %s: %s", url, exc)
        return url


async def resolve_read_urls(
    storage: StorageBackend,
    urls: list[str],
    ttl_seconds: int = SIGNED_URL_TTL,
    concurrency: int = STORAGE_BATCH_CONCURRENCY,
) -> list[ResolvedUrl]:
    """Resolve each URL independently; one failure does not affect the others."""
    results = await gather_bounded(urls, lambda u: _sign(storage, u, ttl_seconds), concurrency)
    resolved: list[ResolvedUrl] = []
    for url, result in zip(urls, results):
        if isinstance(result, Exception):
            logger.warning("Failed to generate signed URL for %s: %s", url, result)
            resolved.append(ResolvedUrl(original_url=url, signed_url=url, error=str(result)))
        else:
            resolved.append(ResolvedUrl(original_url=url, signed_url=result))
    return resolved
