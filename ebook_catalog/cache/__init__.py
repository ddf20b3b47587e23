"""Generic caches shared across request handlers."""

from .ttl_cache import KeyValueCache, TTLCache

__all__ = ["KeyValueCache", "TTLCache"]
