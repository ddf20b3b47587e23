"""Shared fixtures for catalog API route tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ebook_catalog import config_manager as cfg
from ebook_catalog.cache import TTLCache
from ebook_catalog.webapi.application import create_app
from ebook_catalog.webapi.dependencies import get_metadata_cache_store, get_settings_dependency

API_TOKEN = "s3cret-token"


@pytest.fixture
def library_root(tmp_path: Path) -> Path:
    root = tmp_path / "library"
    root.mkdir()
    return root


@pytest.fixture
def make_app(library_root: Path) -> Iterator[Callable[..., FastAPI]]:
    """Return a factory building an app wired to ``library_root``.

    Keyword arguments become :class:`CatalogSettings` fields.
    """

    created: list[FastAPI] = []

    def _factory(**overrides) -> FastAPI:
        settings = cfg.CatalogSettings(library_root=str(library_root), **overrides)
        store = TTLCache()
        app = create_app()
        app.dependency_overrides[get_settings_dependency] = lambda: settings
        app.dependency_overrides[get_metadata_cache_store] = lambda: store
        created.append(app)
        return app

    yield _factory
    for app in created:
        app.dependency_overrides.clear()


@pytest.fixture
def client(make_app) -> Iterator[TestClient]:
    """Client for an app with no API token configured."""

    with TestClient(make_app()) as test_client:
        yield test_client


@pytest.fixture
def secured_client(make_app) -> Iterator[TestClient]:
    with TestClient(make_app(api_token=API_TOKEN)) as test_client:
        yield test_client


@pytest.fixture
def api_token() -> str:
    return API_TOKEN
