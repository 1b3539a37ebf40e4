"""FastAPI dependencies for the storage gateway."""

from fastapi import Request

from media_gateway.storage.base import StorageBackend


def get_storage(request: Request) -> StorageBackend:
    """The backend built once at startup by the app lifespan."""
    return request.app.state.storage
