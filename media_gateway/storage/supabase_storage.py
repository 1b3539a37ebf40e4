"""Supabase Storage backend."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from supabase import Client, create_client

from media_gateway.storage.base import StorageBackend, UploadTarget
from media_gateway.storage.exceptions import (
    ConfigurationError,
    DeleteError,
    NegotiationError,
    SigningError,
)
from media_gateway.storage.keys import KEY_ROOT, extract_key, has_key_root_segment

logger = logging.getLogger(__name__)


def _reason(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class SupabaseStorage(StorageBackend):
    """
    Store files in a Supabase Storage bucket.
    Callers upload straight to Supabase with a signed upload URL and token.
    Reads are signed unless the bucket is public.
    """

    name = "managed-cloud"

    def __init__(
        self,
        url: str,
        service_role_key: str,
        bucket: str,
        public_bucket: bool = False,
        timeout: float = 10.0,
        client: Client | None = None,
    ) -> None:
        super().__init__(timeout=timeout)
        if url and has_key_root_segment(url):
            raise ConfigurationError(f"SUPABASE_URL must not contain a '{KEY_ROOT}' segment: {url!r}")
        if client is None:
            if not url or not service_role_key:
                raise ConfigurationError(
                    "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set when STORAGE_BACKEND=managed-cloud"
                )
            client = create_client(url, service_role_key)
        if not bucket or bucket == KEY_ROOT:
            raise ConfigurationError(f"Invalid Supabase bucket name: {bucket!r}")
        self.client = client
        self.bucket = bucket
        self.public_bucket = public_bucket

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    async def _run(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        # The supabase client is synchronous; keep it off the event loop.
        return await self._call(asyncio.to_thread(func, *args, **kwargs))

    def public_url(self, key: str) -> str:
        # Some storage3 releases append an empty query string.
        return self._bucket().get_public_url(key).rstrip("?")

    async def negotiate_upload(self, key: str, content_type: str) -> UploadTarget:
        public_url = self.public_url(key)
        if extract_key(public_url) != key:
            raise NegotiationError(key, f"Public URL does not resolve back to the key: {public_url}")
        try:
            data = await self._run(self._bucket().create_signed_upload_url, key)
        except Exception as exc:
            raise NegotiationError(key, _reason(exc)) from exc
        upload_url = data.get("signed_url") or data.get("signedUrl")
        if not upload_url:
            raise NegotiationError(key, "Supabase returned no signed upload URL")
        return UploadTarget(
            upload_url=upload_url,
            public_url=public_url,
            key=key,
            token=data.get("token"),
        )

    async def delete(self, key: str) -> None:
        try:
            await self._run(self._bucket().remove, [key])
        except Exception as exc:
            raise DeleteError(key, _reason(exc)) from exc
        logger.debug("Deleted %s from bucket %s", key, self.bucket)

    async def sign_get_url(self, url: str, key: str, ttl_seconds: int) -> str:
        if self.public_bucket:
            return url
        try:
            signed = await self._run(self._bucket().create_signed_url, key, ttl_seconds)
        except Exception as exc:
            raise SigningError(key, _reason(exc)) from exc
        signed_url = signed.get("signedUrl") or signed.get("signedURL")
        if not signed_url:
            raise SigningError(key, "Supabase returned no signed URL")
        return signed_url
