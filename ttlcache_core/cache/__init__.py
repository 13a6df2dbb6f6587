"""Cache module - Entry model and cache contract.

This module provides the cache interfaces and entry management.
"""

from ttlcache_core.cache.entry import (
    CacheEntry,
    resolve_expiry,
    utcnow,
)
from ttlcache_core.cache.cache import (
    AsyncCache,
    Cache,
    CacheConfig,
    CacheStats,
)

__all__ = [
    "CacheEntry",
    "resolve_expiry",
    "utcnow",
    "Cache",
    "AsyncCache",
    "CacheConfig",
    "CacheStats",
]
