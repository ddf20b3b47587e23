"""Dependency wiring for the FastAPI application."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from .. import config_manager as cfg
from .. import logging_manager as log_mgr
from ..cache import TTLCache
from ..catalog import CatalogService, MetadataCache
from ..storage import FileStorage, LocalFileStorage

logger = log_mgr.logger


def get_settings_dependency() -> cfg.CatalogSettings:
    """Return the active settings for request handlers."""

    return cfg.get_settings()


@lru_cache
def get_metadata_cache_store() -> TTLCache:
    """Return the process-wide metadata cache shared across requests."""

    return TTLCache()


def get_file_storage(
    settings: cfg.CatalogSettings = Depends(get_settings_dependency),
) -> FileStorage:
    """Return storage rooted at the configured library directory."""

    return LocalFileStorage(cfg.get_library_root(settings=settings), base_url=settings.storage_base_url)


def get_catalog_service(
    storage: FileStorage = Depends(get_file_storage),
    store: TTLCache = Depends(get_metadata_cache_store),
    settings: cfg.CatalogSettings = Depends(get_settings_dependency),
) -> CatalogService:
    """Build a catalog service over the request's storage and the shared cache."""

    metadata = MetadataCache(storage, store, ttl_seconds=settings.metadata_cache_ttl_seconds)
    return CatalogService(storage, metadata)


__all__ = [
    "get_catalog_service",
    "get_file_storage",
    "get_metadata_cache_store",
    "get_settings_dependency",
]
