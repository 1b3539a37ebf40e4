"""Remove stored media when its owning design or color goes away."""

import logging
from dataclasses import dataclass, field

from media_gateway.config import STORAGE_BATCH_CONCURRENCY
from media_gateway.services.batching import gather_bounded
from media_gateway.storage.base import StorageBackend
from media_gateway.storage.exceptions import InvalidKeyError
from media_gateway.storage.keys import extract_key

logger = logging.getLogger(__name__)


@dataclass
class CascadeReport:
    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


async def delete_object(storage: StorageBackend, url: str) -> str:
    """
    Delete the object behind a single canonical URL and return its key.
    Raises InvalidKeyError for URLs without a key and DeleteError on backend failure.
    """
    key = extract_key(url)
    if key is None:
        raise InvalidKeyError(f"Invalid image URL format: {url}")
    await storage.delete(key)
    logger.info("Deleted from %s storage: %s", storage.name, key)
    return key


async def cascade_delete(
    storage: StorageBackend,
    urls: list[str],
    concurrency: int = STORAGE_BATCH_CONCURRENCY,
) -> CascadeReport:
    """
    Best-effort delete of every object referenced by urls.
    Failures are logged and skipped so the owning record can still be removed;
    objects left behind are orphans. Never raises StorageError.
    """
    report = CascadeReport()
    keyed: list[tuple[str, str]] = []
    for url in urls:
        key = extract_key(url)
        if key is None:
            logger.warning("No storage key in %s; skipping", url)
            report.skipped.append(url)
        else:
            keyed.append((url, key))

    results = await gather_bounded(keyed, lambda item: storage.delete(item[1]), concurrency)
    for (url, key), result in zip(keyed, results):
        if isinstance(result, Exception):
            logger.error("Failed to delete image %s: %s", url, result)
            report.failed.append(key)
        else:
            logger.info("Deleted from %s storage: %s", storage.name, key)
            report.deleted.append(key)
    return report
