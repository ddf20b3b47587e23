"""Dataclasses describing catalog entries, metadata, and aggregates."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any, Dict, Optional

_MIME_TYPES: Dict[str, str] = {
    "epub": "application/epub+zip",
    "pdf": "application/pdf",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "webp": "image/webp",
}
DEFAULT_MIME_TYPE = "application/octet-stream"

SUPPORTED_EXTENSIONS = frozenset({"epub", "pdf"})


def file_extension(path: str) -> str:
    """Return the extension of ``path`` without the leading dot."""

    suffix = PurePosixPath(path.replace("\\", "/")).suffix
    return suffix[1:] if suffix else ""


def guess_mime_type(name: str) -> str:
    """Map a file name onto a mime type using a fixed extension table."""

    return _MIME_TYPES.get(file_extension(name).lower(), DEFAULT_MIME_TYPE)


def is_supported_file(path: str) -> bool:
    return file_extension(path).lower() in SUPPORTED_EXTENSIONS


@dataclass(frozen=True)
class BookMetadata:
    """Bibliographic fields derived from an archive; every field is optional."""

    title: Optional[str] = None
    author: Optional[str] = None
    language: Optional[str] = None
    cover_path: Optional[str] = None

    @classmethod
    def defaults_for(cls, path: str) -> "BookMetadata":
        """Return the filename-derived fallback used when extraction yields nothing."""

        return cls(title=PurePosixPath(path.replace("\\", "/")).stem)

    def merged_over(self, defaults: "BookMetadata") -> "BookMetadata":
        """Overlay the present fields of ``self`` onto ``defaults``."""

        updates = {
            item.name: getattr(self, item.name)
            for item in fields(self)
            if getattr(self, item.name) is not None
        }
        return replace(defaults, **updates)

    def is_empty(self) -> bool:
        return all(getattr(self, item.name) is None for item in fields(self))


@dataclass(frozen=True)
class CatalogEntry:
    """Domain representation of one file in the library."""

    id: str
    path: str
    file_name: str
    extension: str
    file_size: int
    last_modified: float
    mime_type: str
    title: Optional[str] = None
    author: Optional[str] = None
    language: Optional[str] = None
    cover_path: Optional[str] = None

    @property
    def has_cover(self) -> bool:
        return bool(self.cover_path)

    @property
    def last_modified_at(self) -> datetime:
        return datetime.fromtimestamp(self.last_modified, tz=timezone.utc)

    def as_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "path": self.path,
            "file_name": self.file_name,
            "extension": self.extension,
            "file_size": self.file_size,
            "last_modified": self.last_modified,
            "title": self.title,
            "author": self.author,
            "language": self.language,
            "cover_path": self.cover_path,
            "mime_type": self.mime_type,
        }


@dataclass(frozen=True)
class CatalogPage:
    """One page of catalog entries plus the pre-slice total."""

    total: int
    page: int
    per_page: int
    items: list[CatalogEntry] = field(default_factory=list)

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))


@dataclass(frozen=True)
class CatalogStats:
    """Aggregate snapshot over the full, unfiltered catalog."""

    count: int
    total_size_bytes: int
    most_recent_modification: Optional[float]
    generated_at: datetime

    def as_payload(self) -> Dict[str, Any]:
        latest = (
            datetime.fromtimestamp(self.most_recent_modification, tz=timezone.utc).isoformat()
            if self.most_recent_modification is not None
            else None
        )
        return {
            "total_books": self.count,
            "total_size_bytes": self.total_size_bytes,
            "last_file_change": latest,
            "generated_at": self.generated_at.isoformat(),
        }


@dataclass
class CoverStream:
    """Open stream over a cover image stored inside an archive."""

    stream: Any
    mime_type: str
    cover_path: str


__all__ = [
    "BookMetadata",
    "CatalogEntry",
    "CatalogPage",
    "CatalogStats",
    "CoverStream",
    "DEFAULT_MIME_TYPE",
    "SUPPORTED_EXTENSIONS",
    "file_extension",
    "guess_mime_type",
    "is_supported_file",
]
