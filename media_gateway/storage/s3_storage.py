"""S3-compatible storage (Wasabi, MinIO, AWS) optionally fronted by a CDN."""

import asyncio
import logging
from contextlib import AsyncExitStack
from typing import Any

import aioboto3
from botocore.config import Config
from botocore.exceptions import ClientError

from media_gateway.storage.base import StorageBackend, UploadTarget
from media_gateway.storage.exceptions import (
    ConfigurationError,
    DeleteError,
    NegotiationError,
    SigningError,
)
from media_gateway.storage.keys import KEY_ROOT, build_public_url, has_key_root_segment

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = {"404", "NoSuchKey", "NotFound"}


def cdn_base_url(cdn_url: str) -> str:
    """Accept either a bare CDN hostname or a full https:// origin."""
    cdn_url = cdn_url.strip().rstrip("/")
    if "://" not in cdn_url:
        cdn_url = f"https://{cdn_url}"
    return cdn_url


class S3CdnStorage(StorageBackend):
    """
    Store files in an S3-compatible bucket.
    Callers PUT straight to a presigned URL. Public URLs point at the CDN when
    one is configured, with the bucket kept as the first path segment: the CDN
    record can only name the object store's hostname, so the origin needs the
    bucket in the path to find the object.
    """

    name = "s3-cdn"

    def __init__(
        self,
        bucket: str,
        endpoint_url: str,
        region: str = "us-east-1",
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        cdn_url: str | None = None,
        upload_ttl: int = 3600,
        timeout: float = 10.0,
        session: aioboto3.Session | None = None,
    ) -> None:
        super().__init__(timeout=timeout)
        if not bucket or bucket == KEY_ROOT:
            raise ConfigurationError(f"Invalid S3 bucket name: {bucket!r}")
        if not endpoint_url:
            raise ConfigurationError("S3_ENDPOINT must be set when STORAGE_BACKEND=s3-cdn")
        for setting, value in (("S3_ENDPOINT", endpoint_url), ("CDN_URL", cdn_url)):
            if value and has_key_root_segment(value):
                raise ConfigurationError(f"{setting} must not contain a '{KEY_ROOT}' segment: {value!r}")
        self.bucket = bucket
        self.endpoint_url = endpoint_url.rstrip("/")
        self.region = region
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.cdn_url = cdn_base_url(cdn_url) if cdn_url else None
        self.upload_ttl = upload_ttl
        self._session = session or aioboto3.Session()
        self._config = Config(
            signature_version="s3v4",
            connect_timeout=timeout,
            read_timeout=timeout,
            retries={"max_attempts": 2},
        )
        self._client: Any = None
        self._client_lock = asyncio.Lock()
        self._exit_stack = AsyncExitStack()

    def _client_kwargs(self) -> dict:
        kwargs: dict = {
            "region_name": self.region,
            "endpoint_url": self.endpoint_url,
            "config": self._config,
        }
        if self.access_key_id:
            kwargs["aws_access_key_id"] = self.access_key_id
        if self.secret_access_key:
            kwargs["aws_secret_access_key"] = self.secret_access_key
        return kwargs

    def public_url(self, key: str) -> str:
        base = self.cdn_url or self.endpoint_url
        return build_public_url(f"{base}/{self.bucket}", key)

    async def _get_client(self) -> Any:
        """Open the shared S3 client on first use; close() releases it."""
        if self._client is None:
            async with self._client_lock:
                if self._client is None:
                    self._client = await self._exit_stack.enter_async_context(
                        self._session.client("s3", **self._client_kwargs())
                    )
        return self._client

    async def close(self) -> None:
        await self._exit_stack.aclose()
        self._exit_stack = AsyncExitStack()
        self._client = None

    async def _presign(self, method: str, params: dict, expires_in: int) -> str:
        s3 = await self._get_client()
        return await s3.generate_presigned_url(method, Params=params, ExpiresIn=expires_in)

    async def negotiate_upload(self, key: str, content_type: str) -> UploadTarget:
        params = {"Bucket": self.bucket, "Key": key, "ContentType": content_type}
        try:
            upload_url = await self._call(self._presign("put_object", params, self.upload_ttl))
        except Exception as exc:
            raise NegotiationError(key, str(exc) or type(exc).__name__) from exc
        return UploadTarget(upload_url=upload_url, public_url=self.public_url(key), key=key)

    async def _delete_object(self, key: str) -> None:
        s3 = await self._get_client()
        try:
            await s3.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") not in _MISSING_KEY_CODES:
                raise
            logger.debug("Object already gone: %s", key)

    async def delete(self, key: str) -> None:
        try:
            await self._call(self._delete_object(key))
        except Exception as exc:
            raise DeleteError(key, str(exc) or type(exc).__name__) from exc

    async def sign_get_url(self, url: str, key: str, ttl_seconds: int) -> str:
        params = {"Bucket": self.bucket, "Key": key}
        try:
            return await self._call(self._presign("get_object", params, ttl_seconds))
        except Exception as exc:
            raise SigningError(key, str(exc) or type(exc).__name__) from exc
