"""Layered configuration: bundled defaults, a local JSON file, then the environment."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ebook_catalog import logging_manager

from .constants import DEFAULT_CONFIG_PATH, DEFAULT_LOCAL_CONFIG_PATH, SENSITIVE_CONFIG_KEYS
from .settings import CatalogSettings, apply_settings_updates, load_environment_overrides

logger = logging_manager.get_logger().getChild("config")

_ACTIVE_SETTINGS: Optional[CatalogSettings] = None


def _read_json_layer(path: Path) -> Optional[Dict[str, Any]]:
    """Return the object stored in ``path``; ``None`` when absent or unusable."""

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as exc:
        logger.warning(
            "Skipping unreadable configuration file %s",
            path,
            extra={"event": "config.file.invalid", "error": str(exc)},
        )
        return None
    if not isinstance(data, dict):
        logger.warning("Configuration file %s is not a JSON object", path, extra={"event": "config.file.invalid"})
        return None
    return data


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        merged[key] = _merge(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return merged


def _override_path(config_file: Optional[str]) -> Path:
    if not config_file:
        return DEFAULT_LOCAL_CONFIG_PATH
    return (Path.cwd() / Path(config_file).expanduser()).resolve()


def load_configuration(config_file: Optional[str] = None) -> Dict[str, Any]:
    """Build and activate settings, returning them without secret values.

    ``config_file`` replaces ``conf/config.local.json`` as the override layer.
    Environment variables are applied last. Raises ``RuntimeError`` when the
    merged JSON does not validate.
    """

    global _ACTIVE_SETTINGS

    payload: Dict[str, Any] = {}
    applied: List[str] = []
    for path in (DEFAULT_CONFIG_PATH, _override_path(config_file)):
        layer = _read_json_layer(path)
        if layer is not None:
            payload = _merge(payload, layer)
            applied.append(str(path))

    try:
        settings = CatalogSettings.model_validate(payload)
    except ValidationError as exc:
        raise RuntimeError("Invalid configuration detected") from exc

    _ACTIVE_SETTINGS = apply_settings_updates(settings, load_environment_overrides())
    logger.debug("Configuration loaded", extra={"event": "config.loaded", "files": applied})
    return _ACTIVE_SETTINGS.model_dump(mode="python", exclude=set(SENSITIVE_CONFIG_KEYS))


def get_settings() -> CatalogSettings:
    """Return the active settings, falling back to defaults plus environment overrides."""

    global _ACTIVE_SETTINGS
    if _ACTIVE_SETTINGS is None:
        _ACTIVE_SETTINGS = apply_settings_updates(CatalogSettings(), load_environment_overrides())
    return _ACTIVE_SETTINGS


def reset_settings() -> None:
    global _ACTIVE_SETTINGS
    _ACTIVE_SETTINGS = None


def get_library_root(create: bool = False, settings: Optional[CatalogSettings] = None) -> Path:
    """Resolve ``library_root`` against the working directory."""

    root = (Path.cwd() / Path((settings or get_settings()).library_root).expanduser()).resolve()
    if create:
        root.mkdir(parents=True, exist_ok=True)
    return root


__all__ = [
    "get_library_root",
    "get_settings",
    "load_configuration",
    "reset_settings",
]
