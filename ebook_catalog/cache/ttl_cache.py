"""In-process key-value cache with per-entry expiry."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

from .. import logging_manager as log_mgr

logger = log_mgr.get_logger().getChild("cache.ttl")

T = TypeVar("T")

_MISSING = object()


@runtime_checkable
class KeyValueCache(Protocol):
    """Cache contract consumed by the metadata cache."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        ...

    def delete(self, key: str) -> bool:
        ...

    def clear(self) -> int:
        ...

    def get_or_compute(self, key: str, ttl_seconds: float, factory: Callable[[], T]) -> T:
        ...


@dataclass
class _CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    """Thread-safe dictionary cache whose entries expire after a TTL.

    The lock only guards the underlying mapping. ``get_or_compute`` runs the
    factory outside the lock, so two threads missing on the same key may both
    compute; the last writer wins.
    """

    def __init__(
        self,
        *,
        max_entries: int = 4096,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, _CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _lookup(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        if entry.expires_at <= self._clock():
            del self._entries[key]
            logger.debug("Cache entry expired", extra={"event": "cache.expired", "key": key})
            return _MISSING
        return entry.value

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            value = self._lookup(key)
        return default if value is _MISSING else value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        if ttl_seconds <= 0:
            return
        expires_at = self._clock() + float(ttl_seconds)
        with self._lock:
            self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cache entry", extra={"event": "cache.evicted", "key": evicted})

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""

        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def get_or_compute(self, key: str, ttl_seconds: float, factory: Callable[[], T]) -> T:
        with self._lock:
            value = self._lookup(key)
        if value is not _MISSING:
            return value
        computed = factory()
        self.set(key, computed, ttl_seconds)
        return computed


__all__ = ["KeyValueCache", "TTLCache"]
