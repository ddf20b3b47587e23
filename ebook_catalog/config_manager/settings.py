"""Pydantic models and helper utilities for configuration values."""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ebook_catalog import logging_manager

from .constants import (
    DEFAULT_DATABASE_URL,
    DEFAULT_IMPORT_PREFIX,
    DEFAULT_LIBRARY_ROOT,
    DEFAULT_METADATA_CACHE_TTL_HOURS,
    DEFAULT_PER_PAGE,
    MAX_PER_PAGE,
    MAX_QUERY_LENGTH,
)

logger = logging_manager.get_logger()


class CatalogSettings(BaseModel):
    """Typed representation of the application configuration."""

    model_config = ConfigDict(extra="allow")

    library_root: str = str(DEFAULT_LIBRARY_ROOT)
    api_token: Optional[SecretStr] = None
    metadata_cache_ttl_hours: float = Field(default=DEFAULT_METADATA_CACHE_TTL_HOURS, ge=0)
    default_per_page: int = Field(default=DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE)
    max_query_length: int = Field(default=MAX_QUERY_LENGTH, ge=1)
    storage_base_url: str = ""
    database_url: Optional[SecretStr] = None
    import_prefix: str = DEFAULT_IMPORT_PREFIX
    log_level: str = "INFO"

    @property
    def metadata_cache_ttl_seconds(self) -> float:
        return float(self.metadata_cache_ttl_hours) * 3600.0

    def api_token_value(self) -> str:
        """Return the configured shared secret, or an empty string when disabled."""

        if self.api_token is None:
            return ""
        return self.api_token.get_secret_value().strip()

    def database_url_value(self) -> str:
        if self.database_url is None:
            return DEFAULT_DATABASE_URL
        return self.database_url.get_secret_value() or DEFAULT_DATABASE_URL


class EnvironmentOverrides(BaseSettings):
    """Configuration overrides sourced from environment variables."""

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    library_root: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("LIBRARY_ROOT", "EBOOK_LIBRARY_ROOT"),
    )
    api_token: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("LIBRARY_API_TOKEN", "EBOOK_API_TOKEN"),
    )
    metadata_cache_ttl_hours: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("EBOOK_METADATA_CACHE_TTL_HOURS")
    )
    default_per_page: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("EBOOK_DEFAULT_PER_PAGE")
    )
    storage_base_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("EBOOK_STORAGE_BASE_URL")
    )
    database_url: Optional[SecretStr] = Field(
        default=None, validation_alias=AliasChoices("DATABASE_URL", "EBOOK_DATABASE_URL")
    )
    import_prefix: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("EBOOK_IMPORT_PREFIX")
    )
    log_level: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("EBOOK_LOG_LEVEL")
    )


def load_environment_overrides() -> Dict[str, Any]:
    """Return configuration overrides sourced from environment variables."""

    try:
        overrides = EnvironmentOverrides()
    except ValidationError as exc:
        logger.warning(
            "Invalid environment configuration detected; using defaults.",
            extra={
                "event": "config.env.validation_error",
                "error": str(exc),
                "console_suppress": True,
            },
        )
        return {}
    return overrides.model_dump(exclude_none=True)


def apply_settings_updates(settings: CatalogSettings, updates: Dict[str, Any]) -> CatalogSettings:
    """Return a copy of ``settings`` updated with ``updates`` if any values exist."""

    if not updates:
        return settings
    try:
        return CatalogSettings.model_validate({**settings.model_dump(), **updates})
    except ValidationError as exc:
        logger.warning(
            "Ignoring invalid configuration overrides.",
            extra={"event": "config.overrides.invalid", "error": str(exc)},
        )
        return settings


__all__ = [
    "CatalogSettings",
    "EnvironmentOverrides",
    "apply_settings_updates",
    "load_environment_overrides",
]
