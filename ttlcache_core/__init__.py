"""TTLCache - Expiring Key-Value Cache, Local or Shared.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

One cache contract over two engines:
- MemoryCache: process-local, TTL-bounded, lock-striped map
- RedisCache: shared across processes, built on SET NX PXAT
- Same get / put / put_if_absent semantics on both
- Absolute expiry per entry, default TTL per engine
- Expired entries are never returned

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                        TTLCache System                          │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────────────┐        ┌─────────────────────┐         │
    │  │  Cache (blocking)   │        │ AsyncCache (await)  │ CONTRACT│
    │  └──────────┬──────────┘        └──────────┬──────────┘         │
    │             │                              │                    │
    │  ┌──────────┴──────────┐        ┌──────────┴──────────┐         │
    │  │    MemoryCache      │        │     RedisCache      │ ENGINES │
    │  │  striped locks,     │        │  GET / SET NX PXAT, │         │
    │  │  lazy sweep         │        │  read-time recheck  │         │
    │  └──────────┬──────────┘        └──────────┬──────────┘         │
    │             │                              │                    │
    │  ┌──────────┴──────────────────────────────┴──────────┐         │
    │  │        CacheEntry {expiresAt, value}               │ ENTRY   │
    │  └────────────────────────────────────────────────────┘         │
    │                                            │                    │
    │                         ┌──────────────────┴──────────┐         │
    │                         │ CacheEntryCodec + Serializer│ PROTOCOL│
    │                         │   json / msgpack / pickle   │         │
    │                         └─────────────────────────────┘         │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from datetime import timedelta
    from ttlcache_core import CacheConfig, MemoryCache, RedisCache, RedisConfig

    # Local cache, entries live one minute unless told otherwise
    cache = MemoryCache(CacheConfig(default_ttl=timedelta(minutes=1)))
    cache.put("user:1", {"name": "John"})
    user = cache.get("user:1")

    # Shared cache
    config = RedisConfig(url="redis://localhost:6379/0", default_ttl=30)
    async with RedisCache(config) as shared:
        if await shared.put_if_absent("lock:report", "worker-1"):
            ...
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from ttlcache_core.errors import (
    CacheError,
    CacheKeyError,
    CacheSerializationError,
    CacheTransportError,
)
from ttlcache_core.cache.entry import CacheEntry
from ttlcache_core.cache.cache import (
    AsyncCache,
    Cache,
    CacheConfig,
    CacheStats,
)
from ttlcache_core.store.memory import AsyncMemoryCache, MemoryCache
from ttlcache_core.store.redis import RedisCache, RedisConfig
from ttlcache_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
    PickleSerializer,
    MsgPackSerializer,
)
from ttlcache_core.protocol.codec import CacheEntryCodec

__all__ = [
    # Cache
    "Cache",
    "AsyncCache",
    "CacheConfig",
    "CacheStats",
    "CacheEntry",
    # Engines
    "MemoryCache",
    "AsyncMemoryCache",
    "RedisCache",
    "RedisConfig",
    # Protocol
    "Serializer",
    "JSONSerializer",
    "PickleSerializer",
    "MsgPackSerializer",
    "CacheEntryCodec",
    # Errors
    "CacheError",
    "CacheKeyError",
    "CacheTransportError",
    "CacheSerializationError",
]
