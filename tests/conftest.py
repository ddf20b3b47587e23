"""Shared pytest configuration for the ebook-catalog test suite."""

from __future__ import annotations

import os

# Keep test runs from writing rotating log files into the package tree.
os.environ.setdefault("EBOOK_CATALOG_LOG_TO_FILE", "0")

import pytest  # noqa: E402

from ebook_catalog import config_manager as cfg  # noqa: E402

_CATALOG_ENV_VARS = (
    "LIBRARY_ROOT",
    "EBOOK_LIBRARY_ROOT",
    "LIBRARY_API_TOKEN",
    "EBOOK_API_TOKEN",
    "EBOOK_METADATA_CACHE_TTL_HOURS",
    "EBOOK_DEFAULT_PER_PAGE",
    "EBOOK_STORAGE_BASE_URL",
    "DATABASE_URL",
    "EBOOK_DATABASE_URL",
    "EBOOK_IMPORT_PREFIX",
    "EBOOK_LOG_LEVEL",
    "EBOOK_CATALOG_CONFIG",
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch):
    for name in _CATALOG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    cfg.reset_settings()
    yield
    cfg.reset_settings()
