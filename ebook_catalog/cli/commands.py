"""Sub-command implementations for the ebook-catalog CLI."""

from __future__ import annotations

import argparse
import json
import logging
import os

from .. import config_manager as cfg
from .. import logging_manager as log_mgr
from ..cache import TTLCache
from ..catalog import CatalogService, ImportSourceError, MetadataCache
from ..database import get_session_factory, init_schema
from ..importer import BookImporter
from ..storage import LocalFileStorage

LOGGER = log_mgr.get_logger().getChild("cli")


def _apply_shared_arguments(args: argparse.Namespace) -> cfg.CatalogSettings:
    library_root = getattr(args, "library_root", None)
    if library_root:
        os.environ["EBOOK_LIBRARY_ROOT"] = library_root
    config_path = getattr(args, "config", None)
    if config_path:
        os.environ["EBOOK_CATALOG_CONFIG"] = config_path
    cfg.reset_settings()
    cfg.load_configuration(config_path)
    settings = cfg.get_settings()
    if getattr(args, "debug", False):
        log_mgr.configure_logging_level(debug_enabled=True)
    else:
        log_mgr.configure_logging_level(log_level=settings.log_level)
    return settings


def _create_storage(settings: cfg.CatalogSettings) -> LocalFileStorage:
    return LocalFileStorage(cfg.get_library_root(create=True), base_url=settings.storage_base_url)


def execute_import_command(args: argparse.Namespace) -> int:
    """Run ``ebook-catalog import``."""

    settings = _apply_shared_arguments(args)
    storage = _create_storage(settings)

    session_factory = None
    if args.database:
        init_schema()
        session_factory = get_session_factory()

    importer = BookImporter(
        storage,
        session_factory,
        copy=args.copy,
        prefix=settings.import_prefix,
    )

    log_mgr.console_info("Scanning directory: %s", args.path, logger_obj=LOGGER)
    log_mgr.console_info("Copy to library storage: %s", "yes" if args.copy else "no", logger_obj=LOGGER)

    def report(message: str) -> None:
        log_mgr.console_info("%s", message, logger_obj=LOGGER)

    try:
        summary = importer.import_directory(args.path, reporter=report)
    except ImportSourceError as exc:
        log_mgr.console_error(str(exc), logger_obj=LOGGER)
        return 1

    log_mgr.console_info(
        "Import complete. Imported: %d. Skipped: %d.",
        summary.imported,
        summary.skipped,
        logger_obj=LOGGER,
    )
    if summary.skipped:
        log_mgr.console_warning(
            "%d file(s) were skipped; see the messages above.",
            summary.skipped,
            logger_obj=LOGGER,
        )
    return 0


def execute_stats_command(args: argparse.Namespace) -> int:
    """Run ``ebook-catalog stats``."""

    settings = _apply_shared_arguments(args)
    storage = _create_storage(settings)
    service = CatalogService(
        storage,
        MetadataCache(storage, TTLCache(), ttl_seconds=settings.metadata_cache_ttl_seconds),
    )
    print(json.dumps(service.stats().as_payload(), indent=2))
    return 0


def execute_serve_command(args: argparse.Namespace) -> int:
    """Run ``ebook-catalog serve``."""

    from ..webapi.__main__ import main as serve_main

    try:
        serve_main(list(args.server_args or []))
    except KeyboardInterrupt:  # pragma: no cover - user initiated shutdown
        logging.getLogger(__name__).info("Server interrupted by user")
    return 0


__all__ = ["execute_import_command", "execute_serve_command", "execute_stats_command"]
