from __future__ import annotations

import json
from pathlib import Path

import pytest

from ebook_catalog import config_manager as cfg


def test_defaults_without_overrides() -> None:
    settings = cfg.get_settings()

    assert settings.default_per_page == 50
    assert settings.metadata_cache_ttl_seconds == 6 * 3600
    assert settings.api_token_value() == ""
    assert settings.database_url_value() == cfg.DEFAULT_DATABASE_URL


def test_environment_aliases(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("LIBRARY_ROOT", str(tmp_path))
    monkeypatch.setenv("LIBRARY_API_TOKEN", "  token  ")
    monkeypatch.setenv("EBOOK_METADATA_CACHE_TTL_HOURS", "1")

    settings = cfg.get_settings()

    assert cfg.get_library_root() == tmp_path.resolve()
    assert settings.api_token_value() == "token"
    assert settings.metadata_cache_ttl_seconds == 3600


def test_invalid_environment_override_keeps_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EBOOK_DEFAULT_PER_PAGE", "500")

    assert cfg.get_settings().default_per_page == 50


def test_load_configuration_layers_file_and_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    override = tmp_path / "config.json"
    override.write_text(json.dumps({"default_per_page": 20, "api_token": "from-file", "import_prefix": "x"}))
    monkeypatch.setenv("EBOOK_IMPORT_PREFIX", "from-env")

    payload = cfg.load_configuration(str(override))

    assert payload["default_per_page"] == 20
    assert payload["import_prefix"] == "from-env"
    assert "api_token" not in payload
    assert cfg.get_settings().api_token_value() == "from-file"


def test_invalid_configuration_file_raises(tmp_path: Path) -> None:
    override = tmp_path / "config.json"
    override.write_text(json.dumps({"default_per_page": 0}))

    with pytest.raises(RuntimeError):
        cfg.load_configuration(str(override))


def test_get_library_root_can_create(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    target = tmp_path / "new" / "library"
    monkeypatch.setenv("EBOOK_LIBRARY_ROOT", str(target))

    root = cfg.get_library_root(create=True)

    assert root == target.resolve()
    assert root.is_dir()


def test_unreadable_override_file_is_skipped(tmp_path: Path) -> None:
    override = tmp_path / "config.json"
    override.write_text("{not json")

    payload = cfg.load_configuration(str(override))

    assert payload["default_per_page"] == 50
