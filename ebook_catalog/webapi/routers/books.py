"""Routes for browsing, downloading, and previewing catalog books."""

from __future__ import annotations

import re
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse, StreamingResponse

from ... import config_manager as cfg
from ...catalog import (
    CatalogEntry,
    CatalogService,
    CoverUnavailableError,
    StorageUnavailableError,
)
from ...config_manager import MAX_PER_PAGE, MAX_QUERY_LENGTH
from ..auth import require_api_token
from ..dependencies import get_catalog_service, get_settings_dependency
from ..metrics import record_cover_request, record_download
from ..schemas import BookListResponse, BookPayload, PaginationMeta
from ..streaming import stream_file_response, stream_inline_response

router = APIRouter(
    prefix="/api/books",
    tags=["books"],
    dependencies=[Depends(require_api_token)],
)

BOOK_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
BOOK_NOT_FOUND = "Book not found."
COVER_NOT_FOUND = "Cover image not found."
STORAGE_UNAVAILABLE = "Unable to open the requested book."


def _require_entry(service: CatalogService, book_id: str) -> CatalogEntry:
    entry = service.find_by_id(book_id) if BOOK_ID_PATTERN.match(book_id) else None
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BOOK_NOT_FOUND)
    return entry


def _to_payload(request: Request, entry: CatalogEntry) -> BookPayload:
    download_url = str(request.url_for("download_book", book_id=entry.id))
    cover_url = str(request.url_for("book_cover", book_id=entry.id)) if entry.has_cover else None
    return BookPayload.from_entry(entry, download_url=download_url, cover_url=cover_url)


@router.get("", response_model=BookListResponse, name="list_books")
def list_books(
    request: Request,
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=MAX_PER_PAGE),
    q: Optional[str] = Query(None, max_length=MAX_QUERY_LENGTH),
    service: CatalogService = Depends(get_catalog_service),
    settings: cfg.CatalogSettings = Depends(get_settings_dependency),
) -> BookListResponse:
    """Return one page of books ordered by relative path."""

    result = service.paginate(per_page or settings.default_per_page, page, q)
    return BookListResponse(
        data=[_to_payload(request, entry) for entry in result.items],
        meta=PaginationMeta(
            current_page=result.page,
            per_page=result.per_page,
            total=result.total,
            last_page=result.last_page,
        ),
    )


@router.get("/{book_id}", response_model=BookPayload, name="show_book")
def show_book(
    book_id: str,
    request: Request,
    service: CatalogService = Depends(get_catalog_service),
) -> BookPayload:
    """Return the metadata for a single book."""

    return _to_payload(request, _require_entry(service, book_id))


@router.get("/{book_id}/download", name="download_book")
def download_book(
    book_id: str,
    range_header: Optional[str] = Header(default=None, alias="Range"),
    service: CatalogService = Depends(get_catalog_service),
) -> StreamingResponse:
    """Stream the book file as an attachment, honouring single byte ranges."""

    entry = _require_entry(service, book_id)
    stream = service.stream(entry.path)
    response = stream_file_response(
        stream,
        file_size=entry.file_size,
        file_name=entry.file_name,
        media_type=entry.mime_type,
        range_header=range_header,
    )
    record_download(entry.extension, partial=response.status_code == status.HTTP_206_PARTIAL_CONTENT)
    return response


@router.get("/{book_id}/cover", name="book_cover")
def book_cover(
    book_id: str,
    service: CatalogService = Depends(get_catalog_service),
) -> StreamingResponse:
    """Stream the cover image embedded in an EPUB archive."""

    entry = _require_entry(service, book_id)
    cover = service.stream_cover(entry.path) if entry.has_cover else None
    record_cover_request(served=cover is not None)
    if cover is None:
        raise CoverUnavailableError(entry.path)
    return stream_inline_response(
        cover.stream,
        file_name=f"{entry.file_name}.cover",
        media_type=cover.mime_type,
    )


async def _handle_storage_unavailable(_request: Request, _exc: StorageUnavailableError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": STORAGE_UNAVAILABLE}
    )


async def _handle_cover_unavailable(_request: Request, _exc: CoverUnavailableError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": COVER_NOT_FOUND})


def register_exception_handlers(app: FastAPI) -> None:
    """Map catalog errors raised by the book routes onto HTTP responses."""

    app.add_exception_handler(StorageUnavailableError, _handle_storage_unavailable)
    app.add_exception_handler(CoverUnavailableError, _handle_cover_unavailable)


__all__ = ["register_exception_handlers", "router"]
