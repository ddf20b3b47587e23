"""Prometheus metrics exporter for the catalog API.

Automatic HTTP instrumentation comes from prometheus-fastapi-instrumentator;
the catalog-specific series below are recorded by the book and stats routes.
"""

from __future__ import annotations

from fastapi import FastAPI, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Info,
    generate_latest,
)
from prometheus_fastapi_instrumentator import Instrumentator

from .. import logging_manager as log_mgr

logger = log_mgr.get_logger().getChild("webapi.metrics")

METRICS_PATH = "/metrics"

APP_INFO = Info("ebook_catalog", "ebook-catalog application information")

BOOK_DOWNLOADS_TOTAL = Counter(
    "ebook_catalog_book_downloads_total",
    "Book download responses started, by file extension and range usage",
    ["extension", "partial"],
)

COVER_REQUESTS_TOTAL = Counter(
    "ebook_catalog_cover_requests_total",
    "Cover requests by outcome",
    ["result"],
)

LIBRARY_BOOKS = Gauge(
    "ebook_catalog_library_books",
    "Books in the library as of the last stats snapshot",
)

LIBRARY_SIZE_BYTES = Gauge(
    "ebook_catalog_library_size_bytes",
    "Total size of the library as of the last stats snapshot",
)

_instrumented = False


def record_download(extension: str, partial: bool) -> None:
    BOOK_DOWNLOADS_TOTAL.labels(extension=extension.lower() or "none", partial=str(partial).lower()).inc()


def record_cover_request(served: bool) -> None:
    COVER_REQUESTS_TOTAL.labels(result="served" if served else "missing").inc()


def record_library_snapshot(count: int, total_size_bytes: int) -> None:
    LIBRARY_BOOKS.set(count)
    LIBRARY_SIZE_BYTES.set(total_size_bytes)


def setup_metrics(app: FastAPI) -> None:
    """Wire Prometheus metrics into ``app``.

    HTTP instrumentation registers its collectors globally, so only the first
    application instance in a process is instrumented; every instance still
    exposes ``/metrics``.
    """

    global _instrumented

    try:
        APP_INFO.info({"version": str(app.version), "title": str(app.title)})
    except ValueError:
        logger.debug("Application info already registered", extra={"event": "metrics.info.exists"})

    if not _instrumented:
        try:
            instrumentator = Instrumentator(
                should_group_status_codes=False,
                should_ignore_untemplated=True,
                excluded_handlers=[METRICS_PATH, "/health"],
            )
            instrumentator.instrument(app)
            instrumentator.expose(app, endpoint=METRICS_PATH, include_in_schema=False)
        except ValueError:
            logger.debug(
                "HTTP metrics already registered in this process",
                extra={"event": "metrics.instrument.duplicate"},
            )
        _instrumented = True

    if not any(getattr(route, "path", None) == METRICS_PATH for route in app.routes):

        @app.get(METRICS_PATH, include_in_schema=False)
        def _metrics_fallback() -> Response:
            return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "record_cover_request",
    "record_download",
    "record_library_snapshot",
    "setup_metrics",
]
