"""Store module - Local and Redis cache engines."""

from ttlcache_core.store.memory import AsyncMemoryCache, MemoryCache
from ttlcache_core.store.redis import RedisCache, RedisConfig

__all__ = [
    "MemoryCache",
    "AsyncMemoryCache",
    "RedisCache",
    "RedisConfig",
]
