"""Custom exception hierarchy for the objects API."""

from __future__ import annotations


class ObjectsError(Exception):
    """Base exception for all objects API errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ObjectsError):
    """Raised when a required setting is missing or invalid."""
    pass


class ValidationError(ObjectsError):
    """Raised when client input is malformed or incomplete."""
    pass


class NotFoundError(ObjectsError):
    """Raised when an identifier does not resolve to a stored record."""
    pass


class UpstreamFailure(ObjectsError):
    """Raised when the database or the blob store fails a request."""
    pass


class StorageError(ObjectsError):
    """Raised when blob storage operations fail."""
    pass


class StorageUnavailable(StorageError):
    """Raised when a transfer to or from the blob store fails."""
    pass


class PersistenceError(ObjectsError):
    """Raised when the record store cannot complete a write or read."""
    pass
