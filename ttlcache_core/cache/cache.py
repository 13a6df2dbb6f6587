"""TTLCache Cache - Cache Contract and Configuration.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Generic, Optional, TypeVar, Union

from ttlcache_core.cache.entry import utcnow

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True)
class CacheConfig:
    """Cache configuration, fixed at construction.

    Attributes:
        name: Cache name
        default_ttl: TTL applied when a write gives no explicit expiry
        sweep_interval: Minimum seconds between local sweeps (0 = every write)
    """

    name: str = "cache"
    default_ttl: Union[timedelta, float] = timedelta(seconds=30)
    sweep_interval: float = 0.0

    def __post_init__(self):
        ttl = self.default_ttl
        if not isinstance(ttl, timedelta):
            ttl = timedelta(seconds=float(ttl))
            object.__setattr__(self, "default_ttl", ttl)
        if ttl <= timedelta(0):
            raise ValueError(f"default_ttl must be positive, got {ttl}")
        if self.sweep_interval < 0:
            raise ValueError(f"sweep_interval must be >= 0, got {self.sweep_interval}")


@dataclass
class CacheStats:
    """Cache statistics.

    Attributes:
        hits: Reads that returned a value
        misses: Reads that found nothing or an expired entry
        sets: Unconditional writes
        conditional_sets: put_if_absent calls that stored
        conditional_rejects: put_if_absent calls that found a live entry
        expirations: Entries dropped for being expired
        errors: Failed operations
        started_at: When counting began (UTC)
    """

    hits: int = 0
    misses: int = 0
    sets: int = 0
    conditional_sets: int = 0
    conditional_rejects: int = 0
    expirations: int = 0
    errors: int = 0
    started_at: datetime = field(default_factory=utcnow)

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def reset(self) -> None:
        """Reset statistics."""
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.conditional_sets = 0
        self.conditional_rejects = 0
        self.expirations = 0
        self.errors = 0
        self.started_at = utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "conditional_sets": self.conditional_sets,
            "conditional_rejects": self.conditional_rejects,
            "expirations": self.expirations,
            "errors": self.errors,
            "hit_rate": self.hit_rate,
            "started_at": self.started_at.isoformat(),
        }


class Cache(ABC, Generic[K, V]):
    """Blocking cache contract.

    Entries carry an absolute expiry. Writes without one get
    ``now + default_ttl``. Expired entries are never returned.

    Example:
        cache = MemoryCache(CacheConfig(default_ttl=timedelta(minutes=5)))
        cache.put("user:1", {"name": "John"})
        user = cache.get("user:1")
        cache.put_if_absent("lock:job", "worker-1")
    """

    @abstractmethod
    def get(self, key: K) -> Optional[V]:
        """Get a live value.

        Args:
            key: Cache key

        Returns:
            The value, or None if missing or expired
        """

    @abstractmethod
    def put(self, key: K, value: V, expires_at: Optional[datetime] = None) -> None:
        """Store a value unconditionally.

        Args:
            key: Cache key
            value: Value to cache
            expires_at: Absolute expiry (defaults to now + default_ttl)
        """

    @abstractmethod
    def put_if_absent(
        self,
        key: K,
        value: V,
        expires_at: Optional[datetime] = None,
    ) -> bool:
        """Store a value only if no live entry holds the key.

        Args:
            key: Cache key
            value: Value to cache
            expires_at: Absolute expiry (defaults to now + default_ttl)

        Returns:
            True if the value was stored
        """

    @abstractmethod
    def size(self) -> int:
        """Get entry count, possibly including entries not yet swept."""

    def is_empty(self) -> bool:
        """Check if the cache holds no entries."""
        return self.size() == 0

    def __len__(self) -> int:
        return self.size()


class AsyncCache(ABC, Generic[K, V]):
    """Awaitable cache contract.

    Same semantics as :class:`Cache`. Backend failures raise instead of
    reading as absent.
    """

    @abstractmethod
    async def get(self, key: K) -> Optional[V]:
        """Get a live value, or None if missing or expired."""

    @abstractmethod
    async def put(self, key: K, value: V, expires_at: Optional[datetime] = None) -> None:
        """Store a value unconditionally."""

    @abstractmethod
    async def put_if_absent(
        self,
        key: K,
        value: V,
        expires_at: Optional[datetime] = None,
    ) -> bool:
        """Store a value only if no live entry holds the key.

        Returns:
            True if the value was stored
        """


__all__ = ["Cache", "AsyncCache", "CacheConfig", "CacheStats"]
