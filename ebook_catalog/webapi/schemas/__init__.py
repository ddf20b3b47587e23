"""Pydantic schemas exposed by the catalog API."""

from .books import BookListResponse, BookPayload, PaginationMeta, StatsResponse

__all__ = ["BookListResponse", "BookPayload", "PaginationMeta", "StatsResponse"]
