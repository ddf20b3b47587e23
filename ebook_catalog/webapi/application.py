"""Application factory for the catalog FastAPI backend."""

from __future__ import annotations

import logging
import os
import re
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .. import config_manager as cfg
from .. import logging_manager as log_mgr
from .metrics import setup_metrics
from .routers import books_router, register_exception_handlers, system_router

LOGGER = log_mgr.get_logger().getChild("webapi")

CONFIG_ENV_VAR = "EBOOK_CATALOG_CONFIG"
CORRELATION_HEADER = "X-Request-ID"

# Default origins considered safe for local development convenience.
DEFAULT_LOCAL_ORIGINS = (
    "http://localhost",
    "http://127.0.0.1",
    "https://localhost",
    "https://127.0.0.1",
)

RANGE_REQUEST_HEADERS = ("Range",)
RANGE_RESPONSE_HEADERS = ("Accept-Ranges", "Content-Length", "Content-Range", "Content-Disposition")


def _parse_cors_origins(raw_value: str | None) -> tuple[list[str], bool]:
    """Return the allowed origins and whether credentials are supported."""

    if raw_value is None:
        return list(DEFAULT_LOCAL_ORIGINS), True

    tokens = [token.strip() for token in re.split(r"[\s,]+", raw_value) if token.strip()]
    if not tokens:
        return [], False
    if "*" in tokens:
        return ["*"], False
    return tokens, True


def _configure_cors(app: FastAPI) -> None:
    allowed_origins, allow_credentials = _parse_cors_origins(os.environ.get("EBOOK_API_CORS_ORIGINS"))
    if not allowed_origins:
        LOGGER.info("CORS middleware disabled; no allowed origins configured.")
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allow_credentials,
        allow_methods=["GET", "HEAD", "OPTIONS"],
        allow_headers=["*"] + list(RANGE_REQUEST_HEADERS),
        expose_headers=list(RANGE_RESPONSE_HEADERS),
    )


def _configure_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def _correlate_request(request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
        with log_mgr.log_context(correlation_id=correlation_id), log_mgr.timed_event(
            "webapi.request",
            f"{request.method} {request.url.path}",
            logger_obj=LOGGER,
            level=logging.INFO,
            path=request.url.path,
        ) as details:
            response = await call_next(request)
            details["status"] = response.status_code
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    app = FastAPI(title="ebook-catalog API", version="0.1.0")

    register_exception_handlers(app)
    setup_metrics(app)

    @app.on_event("startup")
    async def _prepare_runtime() -> None:
        try:
            cfg.load_configuration(os.environ.get(CONFIG_ENV_VAR))
        except RuntimeError:
            LOGGER.exception("Failed to load configuration; using environment defaults")
        else:
            log_mgr.configure_logging_level(log_level=cfg.get_settings().log_level)
        LOGGER.info(
            "Catalog API ready",
            extra={"event": "webapi.startup", "path": str(cfg.get_library_root())},
        )

    _configure_cors(app)
    _configure_request_logging(app)

    app.include_router(system_router)
    app.include_router(books_router)

    return app


__all__ = ["create_app"]
