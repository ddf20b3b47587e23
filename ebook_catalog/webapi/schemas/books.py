"""Schemas for the book catalog endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, SerializerFunctionWrapHandler, model_serializer

from ...catalog import CatalogEntry, CatalogStats, display_text


def _display_or_none(value: Optional[str]) -> Optional[str]:
    return None if value is None else display_text(value)


class BookPayload(BaseModel):
    """Serializable representation of one catalog entry."""

    id: str
    file_name: str
    path: str
    extension: str
    size_bytes: int
    last_modified: str
    title: Optional[str] = None
    author: Optional[str] = None
    language: Optional[str] = None
    mime_type: str
    download_url: str
    cover_url: Optional[str] = None

    @model_serializer(mode="wrap")
    def _omit_missing_cover(self, handler: SerializerFunctionWrapHandler) -> Dict[str, Any]:
        data = handler(self)
        if data.get("cover_url") is None:
            data.pop("cover_url", None)
        return data

    @classmethod
    def from_entry(
        cls, entry: CatalogEntry, *, download_url: str, cover_url: Optional[str] = None
    ) -> "BookPayload":
        return cls(
            id=entry.id,
            file_name=display_text(entry.file_name),
            path=display_text(entry.path),
            extension=entry.extension,
            size_bytes=entry.file_size,
            last_modified=entry.last_modified_at.isoformat(),
            title=_display_or_none(entry.title),
            author=_display_or_none(entry.author),
            language=_display_or_none(entry.language),
            mime_type=entry.mime_type,
            download_url=download_url,
            cover_url=cover_url if entry.has_cover else None,
        )


class PaginationMeta(BaseModel):
    current_page: int
    per_page: int
    total: int
    last_page: int


class BookListResponse(BaseModel):
    """Response envelope for catalog listings."""

    data: List[BookPayload] = Field(default_factory=list)
    meta: PaginationMeta


class StatsResponse(BaseModel):
    """Aggregate snapshot over the whole library."""

    total_books: int
    total_size_bytes: int
    last_file_change: Optional[str] = None
    generated_at: str

    @classmethod
    def from_stats(cls, stats: CatalogStats) -> "StatsResponse":
        return cls(**stats.as_payload())


__all__ = ["BookListResponse", "BookPayload", "PaginationMeta", "StatsResponse"]
