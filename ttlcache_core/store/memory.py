"""TTLCache Memory Store - Process-Local Expiring Cache.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional, TypeVar

from ttlcache_core.cache.cache import AsyncCache, Cache, CacheConfig, CacheStats
from ttlcache_core.cache.entry import CacheEntry, resolve_expiry, utcnow
from ttlcache_core.errors import require_key

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

DEFAULT_STRIPES = 64


class MemoryCache(Cache[K, V]):
    """In-memory cache with TTL expiry and lazy sweeping.

    Entries live in a dict. Locking is per key, using a fixed set of lock
    stripes chosen by ``hash(key)``, so writers to different keys rarely
    contend and no lock ever covers the whole map.

    Expiry is enforced two ways:
    - ``get`` drops an expired entry in the same locked step that reads it
    - every write is followed by a sweep of all expired entries

    ``size()`` may overcount entries that expired since the last sweep, but
    never undercounts live ones.

    Example:
        cache = MemoryCache(CacheConfig(default_ttl=timedelta(seconds=1)))
        cache.put("k", "v")
        cache.get("k")                  # "v"
        cache.put_if_absent("k", "w")   # False
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], datetime] = utcnow,
        stripes: int = DEFAULT_STRIPES,
    ):
        """Initialize memory cache.

        Args:
            config: Cache configuration
            clock: Source of the current UTC instant
            stripes: Number of lock stripes
        """
        if stripes < 1:
            raise ValueError(f"stripes must be >= 1, got {stripes}")
        self.config = config or CacheConfig()
        self._clock = clock
        self._data: Dict[K, CacheEntry[V]] = {}
        self._locks: List[threading.Lock] = [threading.Lock() for _ in range(stripes)]
        self._stats = CacheStats()
        self._stats_lock = threading.Lock()
        self._last_sweep: Optional[float] = None

    def _lock_for(self, key: K) -> threading.Lock:
        return self._locks[hash(key) % len(self._locks)]

    def get(self, key: K) -> Optional[V]:
        require_key(key)
        now = self._clock()

        with self._lock_for(key):
            entry = self._data.get(key)
            if entry is not None and entry.is_expired(now):
                del self._data[key]
                self._record(expirations=1)
                entry = None

        if entry is None:
            self._record(misses=1)
            return None

        self._record(hits=1)
        return entry.value

    def put(self, key: K, value: V, expires_at: Optional[datetime] = None) -> None:
        require_key(key)
        entry = CacheEntry(
            expires_at=resolve_expiry(expires_at, self.config.default_ttl, self._clock()),
            value=value,
        )

        with self._lock_for(key):
            self._data[key] = entry

        self._record(sets=1)
        self._maybe_sweep()

    def put_if_absent(
        self,
        key: K,
        value: V,
        expires_at: Optional[datetime] = None,
    ) -> bool:
        require_key(key)
        now = self._clock()
        entry = CacheEntry(
            expires_at=resolve_expiry(expires_at, self.config.default_ttl, now),
            value=value,
        )

        with self._lock_for(key):
            current = self._data.get(key)
            # An expired occupant counts as absent and is replaced.
            stored = current is None or current.is_expired(now)
            if stored:
                self._data[key] = entry

        if stored:
            self._record(conditional_sets=1)
            if current is not None:
                self._record(expirations=1)
        else:
            self._record(conditional_rejects=1)

        self._maybe_sweep()
        return stored

    def sweep(self) -> int:
        """Remove every entry whose expiry is at or before now.

        Holds one key's stripe at a time, so it interleaves with concurrent
        reads and writes.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        removed = 0

        for key, entry in list(self._data.items()):
            if not entry.is_stale(now):
                continue
            with self._lock_for(key):
                # Skip keys rewritten since the snapshot.
                if self._data.get(key) is entry:
                    del self._data[key]
                    removed += 1

        self._last_sweep = time.monotonic()
        if removed:
            self._record(expirations=removed)
            logger.debug(f"Cache {self.config.name} swept {removed} expired entries")
        return removed

    def _maybe_sweep(self) -> None:
        interval = self.config.sweep_interval
        if (
            interval
            and self._last_sweep is not None
            and time.monotonic() - self._last_sweep < interval
        ):
            return
        self.sweep()

    def size(self) -> int:
        return len(self._data)

    def _record(self, **counts: int) -> None:
        with self._stats_lock:
            for name, n in counts.items():
                setattr(self._stats, name, getattr(self._stats, name) + n)

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._stats

    def reset_stats(self) -> None:
        """Reset statistics."""
        with self._stats_lock:
            self._stats.reset()

    def __contains__(self, key: K) -> bool:
        return self.get(key) is not None

    def __repr__(self) -> str:
        return f"MemoryCache(name={self.config.name!r}, entries={len(self._data)})"


class AsyncMemoryCache(AsyncCache[K, V]):
    """Awaitable view of a :class:`MemoryCache`.

    Lets code written against :class:`AsyncCache` run on local memory,
    e.g. in tests or single-process deployments. No call ever suspends.
    """

    def __init__(self, cache: Optional[MemoryCache[K, V]] = None):
        self.cache = cache if cache is not None else MemoryCache()

    async def get(self, key: K) -> Optional[V]:
        return self.cache.get(key)

    async def put(self, key: K, value: V, expires_at: Optional[datetime] = None) -> None:
        self.cache.put(key, value, expires_at)

    async def put_if_absent(
        self,
        key: K,
        value: V,
        expires_at: Optional[datetime] = None,
    ) -> bool:
        return self.cache.put_if_absent(key, value, expires_at)

    def __repr__(self) -> str:
        return f"AsyncMemoryCache({self.cache!r})"


__all__ = ["MemoryCache", "AsyncMemoryCache"]
