"""Exception hierarchy for the catalog domain."""

from __future__ import annotations


class CatalogError(RuntimeError):
    """Base class for catalog failures that cross the engine boundary."""


class InvalidIdentifierError(CatalogError, ValueError):
    """Raised when an opaque identifier cannot be decoded."""


class StorageUnavailableError(CatalogError):
    """Raised when a catalog file exists but cannot be opened for streaming."""


class CoverUnavailableError(CatalogError):
    """Raised by callers that need an explicit failure for a missing cover."""


class ImportSourceError(CatalogError):
    """Raised when a bulk import source directory cannot be scanned."""


__all__ = [
    "CatalogError",
    "CoverUnavailableError",
    "ImportSourceError",
    "InvalidIdentifierError",
    "StorageUnavailableError",
]
