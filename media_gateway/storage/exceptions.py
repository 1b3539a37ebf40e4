"""Storage error taxonomy shared by all backends."""


class StorageError(Exception):
    """Base class for storage gateway failures."""


class ConfigurationError(StorageError):
    """Backend selector unknown/unset or backend credentials missing."""


class InvalidKeyError(StorageError):
    """Value is not a well-formed StorageKey (or escapes the storage root)."""


class NegotiationError(StorageError):
    """Backend could not produce an upload target. Retryable."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Upload negotiation failed for {key}: {reason}")


class IngestionError(StorageError):
    """Local backend could not write uploaded bytes."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Failed to save {key} locally: {reason}")


class DeleteError(StorageError):
    """Backend unreachable or rejected the delete."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Failed to delete {key}: {reason}")


class SigningError(StorageError):
    """Backend could not produce a signed read URL."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Failed to sign {key}: {reason}")
