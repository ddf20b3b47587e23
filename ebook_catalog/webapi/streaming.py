"""Helpers for streaming catalog files and covers over HTTP."""

from __future__ import annotations

import re
import urllib.parse
from typing import BinaryIO, Iterator, Tuple

from fastapi import HTTPException, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from ..catalog import display_text

CHUNK_SIZE = 1 << 16


class _RangeParseError(Exception):
    """Raised when the supplied Range header cannot be satisfied."""


def parse_byte_range(range_value: str, file_size: int) -> Tuple[int, int]:
    """Return the inclusive byte range requested by ``range_value``.

    ``range_value`` must follow the ``bytes=start-end`` syntax. Only a single range is
    supported and the resulting indices are clamped to the available file size. A
    :class:`_RangeParseError` is raised when the header is malformed or does not
    overlap the file contents.
    """

    if file_size <= 0:
        raise _RangeParseError

    header = range_value.strip()
    if not header.lower().startswith("bytes="):
        raise _RangeParseError

    raw_range = header[len("bytes=") :].strip()
    if "," in raw_range or "-" not in raw_range:
        raise _RangeParseError

    start_token, end_token = raw_range.split("-", 1)

    if not start_token:
        # Suffix range: bytes=-N
        if not end_token.isdigit():
            raise _RangeParseError
        length = int(end_token)
        if length <= 0:
            raise _RangeParseError
        start = max(file_size - length, 0)
        end = file_size - 1
    else:
        if not start_token.isdigit():
            raise _RangeParseError
        start = int(start_token)
        if start >= file_size:
            raise _RangeParseError

        if end_token:
            if not end_token.isdigit():
                raise _RangeParseError
            end = int(end_token)
            if end < start:
                raise _RangeParseError
            end = min(end, file_size - 1)
        else:
            end = file_size - 1

    return start, end


def iter_stream_chunks(stream: BinaryIO, start: int = 0, end: int | None = None) -> Iterator[bytes]:
    """Yield chunks from ``stream`` between ``start`` and ``end`` (inclusive).

    The stream is always closed once iteration stops, including when the
    consumer abandons the generator early.
    """

    try:
        if start:
            stream.seek(start)
        remaining = None if end is None else max(end - start + 1, 0)
        while remaining is None or remaining > 0:
            size = CHUNK_SIZE if remaining is None else min(CHUNK_SIZE, remaining)
            chunk = stream.read(size)
            if not chunk:
                break
            if remaining is not None:
                remaining -= len(chunk)
            yield chunk
    finally:
        stream.close()


def content_disposition(file_name: str, disposition: str) -> str:
    """Build a header value with an ASCII fallback plus the RFC 5987 UTF-8 name."""

    readable = display_text(file_name)
    safe_ascii = re.sub(r"[^0-9A-Za-z._-]", "_", readable) or "download"
    quoted_utf8 = urllib.parse.quote(readable)
    return f"{disposition}; filename=\"{safe_ascii}\"; filename*=UTF-8''{quoted_utf8}"


def stream_file_response(
    stream: BinaryIO,
    *,
    file_size: int,
    file_name: str,
    media_type: str,
    range_header: str | None = None,
    disposition: str = "attachment",
) -> StreamingResponse:
    """Return a range-aware streaming response over an already opened ``stream``."""

    if range_header and "," in range_header:
        # Multiple ranges are not supported; serve the full payload instead.
        range_header = None

    if range_header:
        try:
            start, end = parse_byte_range(range_header, file_size)
        except _RangeParseError as exc:
            stream.close()
            raise HTTPException(
                status_code=status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE,
                detail="Requested range not satisfiable",
                headers={"Content-Range": f"bytes */{file_size}"},
            ) from exc
        status_code = status.HTTP_206_PARTIAL_CONTENT
        headers = {
            "Content-Range": f"bytes {start}-{end}/{file_size}",
            "Accept-Ranges": "bytes",
        }
    else:
        start = 0
        end = file_size - 1 if file_size > 0 else -1
        status_code = status.HTTP_200_OK
        headers = {"Accept-Ranges": "bytes"}

    headers["Content-Length"] = str(max(end - start + 1, 0))
    headers["Content-Disposition"] = content_disposition(file_name, disposition)

    return StreamingResponse(
        iter_stream_chunks(stream, start, end),
        status_code=status_code,
        media_type=media_type,
        headers=headers,
        background=BackgroundTask(stream.close),
    )


def stream_inline_response(stream: BinaryIO, *, file_name: str, media_type: str) -> StreamingResponse:
    """Stream ``stream`` to completion with an inline disposition and unknown length."""

    return StreamingResponse(
        iter_stream_chunks(stream),
        media_type=media_type,
        headers={"Content-Disposition": content_disposition(file_name, "inline")},
        background=BackgroundTask(stream.close),
    )


__all__ = [
    "content_disposition",
    "iter_stream_chunks",
    "parse_byte_range",
    "stream_file_response",
    "stream_inline_response",
]
