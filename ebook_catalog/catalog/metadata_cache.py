"""Freshness-aware memoization of extracted archive metadata."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Callable, Optional

from .. import logging_manager as log_mgr
from ..cache import KeyValueCache
from ..config_manager import DEFAULT_METADATA_CACHE_TTL_HOURS
from ..storage import FileStorage
from .catalog_models import BookMetadata
from .metadata_extractor import extract_metadata

logger = log_mgr.get_logger().getChild("catalog.cache")

CACHE_KEY_PREFIX = "book_meta"

Extractor = Callable[[Path], Optional[BookMetadata]]


class MetadataCache:
    """Resolve metadata for a storage path, re-extracting only when stale.

    The cache key embeds the file's modification time and size, so any change
    to the file orphans the previous entry. Entries additionally expire after
    ``ttl_seconds``.
    """

    def __init__(
        self,
        storage: FileStorage,
        cache: KeyValueCache,
        *,
        ttl_seconds: float = DEFAULT_METADATA_CACHE_TTL_HOURS * 3600,
        extractor: Extractor = extract_metadata,
    ) -> None:
        self._storage = storage
        self._cache = cache
        self._ttl_seconds = ttl_seconds
        self._extractor = extractor

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def cache_key(self, path: str) -> str:
        digest = hashlib.sha1(path.encode("utf-8", errors="surrogateescape")).hexdigest()
        modified = self._storage.last_modified(path)
        size = self._storage.size(path)
        return f"{CACHE_KEY_PREFIX}:{digest}:{modified!r}:{size}"

    def get_or_compute(self, path: str) -> BookMetadata:
        """Return cached metadata for ``path``, extracting it on a miss."""

        key = self.cache_key(path)
        return self._cache.get_or_compute(key, self._ttl_seconds, lambda: self._compute(path))

    def _compute(self, path: str) -> BookMetadata:
        defaults = BookMetadata.defaults_for(path)
        absolute = self._storage.absolute_path(path)
        if absolute is None:
            logger.debug(
                "Storage backend has no local path; using default metadata",
                extra={"event": "catalog.metadata.defaults", "path": path},
            )
            return defaults
        extracted = self._extractor(absolute)
        logger.debug(
            "Computed metadata",
            extra={
                "event": "catalog.metadata.computed",
                "path": path,
                "status": "defaults" if extracted is None or extracted.is_empty() else "parsed",
            },
        )
        if extracted is None:
            return defaults
        return extracted.merged_over(defaults)


__all__ = ["CACHE_KEY_PREFIX", "MetadataCache"]
