"""Run the catalog API under uvicorn: ``python -m ebook_catalog.webapi``."""

from __future__ import annotations

import argparse
import os
from typing import Sequence

import uvicorn

from .. import logging_manager as log_mgr

APP_FACTORY = "ebook_catalog.webapi.application:create_app"
UVICORN_LOG_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the ebook catalog HTTP API with uvicorn")
    parser.add_argument(
        "--host",
        default=os.environ.get("EBOOK_API_HOST", "127.0.0.1"),
        help="Interface to bind (default: %(default)s, or EBOOK_API_HOST)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("EBOOK_API_PORT", "8000")),
        help="Port to listen on (default: %(default)s, or EBOOK_API_PORT)",
    )
    parser.add_argument("--reload", action="store_true", help="Restart the server when source files change.")
    parser.add_argument("--log-level", default="info", choices=UVICORN_LOG_LEVELS)
    tls = parser.add_argument_group("TLS", "Serve HTTPS when both files are given.")
    tls.add_argument("--ssl-certfile", help="PEM certificate chain.")
    tls.add_argument("--ssl-keyfile", help="PEM private key.")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if (args.ssl_certfile is None) != (args.ssl_keyfile is None):
        parser.error("--ssl-certfile and --ssl-keyfile must be provided together")

    log_mgr.get_logger().info(
        "Starting catalog API on %s:%s",
        args.host,
        args.port,
        extra={"event": "webapi.serve.start", "tls": args.ssl_certfile is not None},
    )
    uvicorn.run(
        APP_FACTORY,
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        ssl_certfile=args.ssl_certfile,
        ssl_keyfile=args.ssl_keyfile,
    )


if __name__ == "__main__":  # pragma: no cover - manual execution
    try:
        main()
    except KeyboardInterrupt:
        log_mgr.get_logger().info("Server interrupted by user")
