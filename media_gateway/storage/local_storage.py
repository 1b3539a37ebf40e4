"""Local filesystem storage."""

import asyncio
import logging
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os

from media_gateway.storage.base import StorageBackend, UploadTarget
from media_gateway.storage.exceptions import (
    ConfigurationError,
    DeleteError,
    IngestionError,
    InvalidKeyError,
)
from media_gateway.storage.keys import build_public_url, has_key_root_segment, is_storage_key

logger = logging.getLogger(__name__)

UPLOAD_LOCAL_PATH = "/api/storage/upload-local"
FILES_PATH = "/uploads"


class LocalStorage(StorageBackend):
    """
    Store files on local disk under root, mirroring the key path.
    Uploads are two-phase: negotiate_upload hands out this service's ingestion
    endpoint, and the bytes arrive later through ingest().
    """

    name = "local"

    def __init__(self, root: Path, public_base_url: str, timeout: float = 10.0) -> None:
        super().__init__(timeout=timeout)
        if not public_base_url:
            raise ConfigurationError("PUBLIC_BASE_URL must be set when STORAGE_BACKEND=local")
        if has_key_root_segment(public_base_url):
            raise ConfigurationError(f"PUBLIC_BASE_URL must not contain a 'designs' segment: {public_base_url!r}")
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")

    def resolve_path(self, key: str) -> Path:
        """Filesystem path for key. Raises InvalidKeyError if it escapes root."""
        key = key.lstrip("/")
        if not is_storage_key(key):
            raise InvalidKeyError(f"Invalid storage key: {key!r}")
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root):
            raise InvalidKeyError(f"Invalid storage key: {key!r}")
        return path

    def public_url(self, key: str) -> str:
        return build_public_url(f"{self.public_base_url}{FILES_PATH}", key)

    async def negotiate_upload(self, key: str, content_type: str) -> UploadTarget:
        self.resolve_path(key)
        return UploadTarget(
            upload_url=f"{self.public_base_url}{UPLOAD_LOCAL_PATH}",
            public_url=self.public_url(key),
            key=key,
        )

    async def ingest(self, key: str, content: bytes) -> str:
        """
        Write uploaded bytes for a negotiated key and return its public URL.
        The file only appears under key once fully written; a failed write
        leaves nothing behind.
        """
        path = self.resolve_path(key)
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.part")
        try:
            await self._call(self._write(tmp_path, path, content))
        except (OSError, asyncio.TimeoutError) as exc:
            self._discard(tmp_path)
            raise IngestionError(key, str(exc) or type(exc).__name__) from exc
        logger.info("Stored %s (%d bytes)", key, len(content))
        return self.public_url(key)

    async def delete(self, key: str) -> None:
        path = self.resolve_path(key)
        try:
            await self._call(asyncio.to_thread(self._unlink_and_prune, path))
        except (OSError, asyncio.TimeoutError) as exc:
            raise DeleteError(key, str(exc) or type(exc).__name__) from exc

    async def sign_get_url(self, url: str, key: str, ttl_seconds: int) -> str:
        # Served directly by this service; nothing to sign.
        return url

    @staticmethod
    async def _write(tmp_path: Path, path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(tmp_path, "wb") as f:
            await f.write(content)
        await aiofiles.os.replace(tmp_path, path)

    @staticmethod
    def _discard(tmp_path: Path) -> None:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove partial upload %s: %s", tmp_path, e)

    def _unlink_and_prune(self, path: Path) -> None:
        if not path.exists():
            return
        path.unlink()
        # Remove the variant and entity directories once they are empty.
        parent = path.parent
        for _ in range(2):
            if parent == self.root or any(parent.iterdir()):
                break
            try:
                parent.rmdir()
            except OSError:
                # A concurrent upload may have just created a file here.
                break
            parent = parent.parent
