"""Abstract storage backend."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class UploadTarget:
    """Where and how the caller should send the bytes for one upload."""

    upload_url: str
    public_url: str
    key: str
    token: str | None = None

    def as_dict(self) -> dict:
        return {
            "uploadUrl": self.upload_url,
            "publicUrl": self.public_url,
            "key": self.key,
            "token": self.token,
        }


class StorageBackend(ABC):
    """Interface for design media storage (local disk, Supabase or S3 + CDN)."""

    name: str = ""

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout

    @abstractmethod
    def public_url(self, key: str) -> str:
        """CanonicalURL the object stored under key is served from."""
        ...

    @abstractmethod
    async def negotiate_upload(self, key: str, content_type: str) -> UploadTarget:
        """
        Prepare an upload of key and tell the caller where to send the bytes.
        Raises NegotiationError when the backend refuses.
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the object at key. Deleting a missing key is not an error."""
        ...

    @abstractmethod
    async def sign_get_url(self, url: str, key: str, ttl_seconds: int) -> str:
        """
        Return a time-limited read URL for key, or url itself when reads are public.
        Raises SigningError when the backend cannot sign.
        """
        ...

    async def close(self) -> None:
        """Release client resources."""

    async def _call(self, awaitable: Awaitable[T]) -> T:
        """Await a backend call, giving up after self.timeout seconds (TimeoutError)."""
        return await asyncio.wait_for(awaitable, timeout=self.timeout)
