"""Catalog feature package exports."""

from .catalog_models import (
    BookMetadata,
    CatalogEntry,
    CatalogPage,
    CatalogStats,
    CoverStream,
    guess_mime_type,
    is_supported_file,
)
from .catalog_service import CatalogService
from .cover_resolver import resolve_cover_path
from .errors import (
    CatalogError,
    CoverUnavailableError,
    ImportSourceError,
    InvalidIdentifierError,
    StorageUnavailableError,
)
from .identifiers import decode_identifier, display_text, encode_identifier
from .metadata_cache import MetadataCache
from .metadata_extractor import extract_metadata

__all__ = [
    "BookMetadata",
    "CatalogEntry",
    "CatalogError",
    "CatalogPage",
    "CatalogService",
    "CatalogStats",
    "CoverStream",
    "CoverUnavailableError",
    "ImportSourceError",
    "InvalidIdentifierError",
    "MetadataCache",
    "StorageUnavailableError",
    "decode_identifier",
    "display_text",
    "encode_identifier",
    "extract_metadata",
    "guess_mime_type",
    "is_supported_file",
    "resolve_cover_path",
]
