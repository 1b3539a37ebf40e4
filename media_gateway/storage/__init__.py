# Storage backends

from media_gateway.storage.base import StorageBackend, UploadTarget
from media_gateway.storage.exceptions import (
    ConfigurationError,
    DeleteError,
    IngestionError,
    InvalidKeyError,
    NegotiationError,
    SigningError,
    StorageError,
)
from media_gateway.storage.factory import create_storage_backend

__all__ = [
    "ConfigurationError",
    "DeleteError",
    "IngestionError",
    "InvalidKeyError",
    "NegotiationError",
    "SigningError",
    "StorageBackend",
    "StorageError",
    "UploadTarget",
    "create_storage_backend",
]
