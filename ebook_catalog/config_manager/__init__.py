"""High-level configuration management for ebook-catalog."""
from __future__ import annotations

from .constants import (
    CONF_DIR,
    DEFAULT_CONFIG_PATH,
    DEFAULT_DATABASE_URL,
    DEFAULT_IMPORT_PREFIX,
    DEFAULT_LIBRARY_ROOT,
    DEFAULT_LOCAL_CONFIG_PATH,
    DEFAULT_METADATA_CACHE_TTL_HOURS,
    DEFAULT_PER_PAGE,
    MAX_PER_PAGE,
    MAX_QUERY_LENGTH,
    SENSITIVE_CONFIG_KEYS,
)
from .loader import get_library_root, get_settings, load_configuration, reset_settings
from .settings import CatalogSettings, EnvironmentOverrides, load_environment_overrides

__all__ = [
    "CONF_DIR",
    "CatalogSettings",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_IMPORT_PREFIX",
    "DEFAULT_LIBRARY_ROOT",
    "DEFAULT_LOCAL_CONFIG_PATH",
    "DEFAULT_METADATA_CACHE_TTL_HOURS",
    "DEFAULT_PER_PAGE",
    "EnvironmentOverrides",
    "MAX_PER_PAGE",
    "MAX_QUERY_LENGTH",
    "SENSITIVE_CONFIG_KEYS",
    "get_library_root",
    "get_settings",
    "load_configuration",
    "load_environment_overrides",
    "reset_settings",
]
