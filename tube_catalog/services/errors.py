"""Error kinds raised by the catalog services."""

from __future__ import annotations


class CatalogError(RuntimeError):
    """Base class for failures surfaced to catalog callers."""


class ValidationError(CatalogError):
    """Raised when a required field is missing or invalid."""


class NotFoundError(CatalogError):
    """Raised when a referenced teacher, video or request does not exist."""


class PayloadTooLargeError(CatalogError):
    """Raised when an upload exceeds the configured size ceiling."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"Upload exceeds the maximum size of {limit} bytes")
        self.limit = limit


class StorageIOError(CatalogError):
    """Raised when persisting a collection or blob fails."""


__all__ = [
    "CatalogError",
    "NotFoundError",
    "PayloadTooLargeError",
    "StorageIOError",
    "ValidationError",
]
