"""Shared constants for the configuration manager package."""
from __future__ import annotations

from pathlib import Path

MODULE_DIR = Path(__file__).resolve().parent
SCRIPT_DIR = MODULE_DIR.parent.resolve()
CONF_DIR = SCRIPT_DIR.parent / "conf"
DEFAULT_CONFIG_PATH = CONF_DIR / "config.json"
DEFAULT_LOCAL_CONFIG_PATH = CONF_DIR / "config.local.json"

DEFAULT_STORAGE_RELATIVE = Path("storage")
DEFAULT_LIBRARY_ROOT = DEFAULT_STORAGE_RELATIVE / "library"
DEFAULT_DATABASE_URL = f"sqlite:///{DEFAULT_STORAGE_RELATIVE / 'catalog.db'}"
DEFAULT_METADATA_CACHE_TTL_HOURS = 6
DEFAULT_PER_PAGE = 50
MAX_PER_PAGE = 100
MAX_QUERY_LENGTH = 255
DEFAULT_IMPORT_PREFIX = "books"

SENSITIVE_CONFIG_KEYS = {"api_token", "database_url"}

__all__ = [
    "MODULE_DIR",
    "SCRIPT_DIR",
    "CONF_DIR",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_LOCAL_CONFIG_PATH",
    "DEFAULT_STORAGE_RELATIVE",
    "DEFAULT_LIBRARY_ROOT",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_METADATA_CACHE_TTL_HOURS",
    "DEFAULT_PER_PAGE",
    "MAX_PER_PAGE",
    "MAX_QUERY_LENGTH",
    "DEFAULT_IMPORT_PREFIX",
    "SENSITIVE_CONFIG_KEYS",
]
