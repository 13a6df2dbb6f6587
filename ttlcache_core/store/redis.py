"""TTLCache Redis Store - Shared Expiring Cache on Redis.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, TypeVar

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from ttlcache_core.cache.cache import AsyncCache, CacheConfig, CacheStats
from ttlcache_core.cache.entry import (
    CacheEntry,
    resolve_expiry,
    to_epoch_millis,
    truncate_to_millis,
    utcnow,
)
from ttlcache_core.errors import (
    CacheSerializationError,
    CacheTransportError,
    require_key,
)
from ttlcache_core.protocol.codec import CacheEntryCodec
from ttlcache_core.protocol.serializer import get_serializer

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True)
class RedisConfig(CacheConfig):
    """Redis-specific configuration.

    Attributes:
        url: Connection URL (takes precedence over host/port/db)
        host: Redis host
        port: Redis port
        db: Redis database number
        password: Redis password
        socket_timeout: Socket timeout
        socket_connect_timeout: Connection timeout
        ssl: Enable SSL
        prefix: Bytes prepended to every encoded key
        serializer: Serializer format name for keys and entries
    """

    url: Optional[str] = None
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    ssl: bool = False
    prefix: bytes = b""
    serializer: str = "json"


class RedisCache(AsyncCache[K, V]):
    """Redis-backed cache shared across processes.

    Every value is stored as an ``{expiresAt, value}`` blob with a matching
    absolute ``PXAT`` expiry, so a stale blob is filtered on read even if
    the store has not expired it yet. Conditional writes use ``SET NX``,
    leaving the store to decide which of several racing writers wins.

    One connection is opened per instance and reused for every call.
    Failures are raised as :class:`CacheTransportError`, never reported as
    a miss, and never retried.

    Example:
        async with RedisCache(RedisConfig(url="redis://localhost:6379/0")) as cache:
            await cache.put("k", {"a": 1})
            value = await cache.get("k")
            won = await cache.put_if_absent("lock:job", "worker-1")
    """

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        client: Optional[Any] = None,
        codec: Optional[CacheEntryCodec[K, V]] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize Redis cache.

        Args:
            config: Redis configuration
            client: Existing ``redis.asyncio`` client; not closed by this cache
            codec: Key/entry codec (defaults to the configured serializer)
            clock: Source of the current UTC instant
        """
        self.config: RedisConfig = config or RedisConfig()
        self.codec: CacheEntryCodec[K, V] = codec or CacheEntryCodec(
            get_serializer(self.config.serializer)
        )
        self._client = client
        self._owns_client = client is None
        self._clock = clock
        self._stats = CacheStats()

    def _ensure_connected(self) -> Any:
        """Create the client on first use.

        Returns:
            Redis client
        """
        if self._client is not None:
            return self._client

        if self.config.url:
            self._client = aioredis.Redis.from_url(
                self.config.url,
                single_connection_client=True,
                socket_timeout=self.config.socket_timeout,
                socket_connect_timeout=self.config.socket_connect_timeout,
                decode_responses=False,
            )
            target = self.config.url
        else:
            self._client = aioredis.Redis(
                host=self.config.host,
                port=self.config.port,
                db=self.config.db,
                password=self.config.password,
                socket_timeout=self.config.socket_timeout,
                socket_connect_timeout=self.config.socket_connect_timeout,
                ssl=self.config.ssl,
                single_connection_client=True,
                decode_responses=False,  # We handle serialization
            )
            target = f"{self.config.host}:{self.config.port}/{self.config.db}"

        logger.info(f"Cache {self.config.name} using Redis at {target}")
        return self._client

    async def connect(self) -> None:
        """Open the connection and verify it with PING.

        Raises:
            CacheTransportError: If Redis is unreachable
        """
        client = self._ensure_connected()
        try:
            await client.ping()
        except RedisError as e:
            raise self._transport_error("connect", e) from e

    async def close(self) -> None:
        """Close the connection if this cache opened it.

        An injected client is left open and stays bound to this cache.
        """
        if self._client is None or not self._owns_client:
            return
        await self._client.aclose()
        logger.info(f"Cache {self.config.name} closed Redis connection")
        self._client = None

    def _make_key(self, key: K) -> bytes:
        return self.config.prefix + self.codec.encode_key(key)

    def _transport_error(self, op: str, error: Exception) -> CacheTransportError:
        logger.error(f"Redis {op} error: {error}")
        self._stats.errors += 1
        return CacheTransportError(f"Redis {op} failed: {error}")

    async def get(self, key: K) -> Optional[V]:
        require_key(key)
        client = self._ensure_connected()
        redis_key = self._make_key(key)

        try:
            blob = await client.get(redis_key)
        except RedisError as e:
            raise self._transport_error("get", e) from e

        if blob is None:
            self._stats.misses += 1
            return None

        try:
            entry = self.codec.decode_entry(blob)
        except CacheSerializationError:
            self._stats.errors += 1
            raise

        # Redis handles TTL, but its clock and granularity may differ from ours
        if entry.is_stale(self._clock()):
            self._stats.misses += 1
            self._stats.expirations += 1
            return None

        self._stats.hits += 1
        return entry.value

    async def put(self, key: K, value: V, expires_at: Optional[datetime] = None) -> None:
        require_key(key)
        await self._set(key, value, expires_at, only_if_absent=False)
        self._stats.sets += 1

    async def put_if_absent(
        self,
        key: K,
        value: V,
        expires_at: Optional[datetime] = None,
    ) -> bool:
        require_key(key)
        stored = await self._set(key, value, expires_at, only_if_absent=True)
        if stored:
            self._stats.conditional_sets += 1
        else:
            self._stats.conditional_rejects += 1
        return stored

    async def _set(
        self,
        key: K,
        value: V,
        expires_at: Optional[datetime],
        only_if_absent: bool,
    ) -> bool:
        """Issue one SET carrying the entry blob and its PXAT expiry.

        The expiry is resolved once; the blob and PXAT share that instant.

        Returns:
            True if Redis reports the write happened
        """
        client = self._ensure_connected()
        resolved = truncate_to_millis(
            resolve_expiry(expires_at, self.config.default_ttl, self._clock())
        )
        redis_key = self._make_key(key)
        blob = self.codec.encode_entry(CacheEntry(expires_at=resolved, value=value))

        try:
            reply = await client.set(
                redis_key,
                blob,
                nx=only_if_absent,
                pxat=to_epoch_millis(resolved),
            )
        except RedisError as e:
            op = "set-if-absent" if only_if_absent else "set"
            raise self._transport_error(op, e) from e

        return bool(reply)

    async def health_check(self) -> bool:
        """Check Redis health.

        Returns:
            True if Redis answered PING
        """
        try:
            client = self._ensure_connected()
            return bool(await client.ping())
        except RedisError as e:
            logger.error(f"Health check failed: {e}")
            return False

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._stats

    def reset_stats(self) -> None:
        """Reset statistics."""
        self._stats.reset()

    async def __aenter__(self) -> "RedisCache[K, V]":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        if self.config.url:
            return f"RedisCache(url={self.config.url!r})"
        return f"RedisCache(host={self.config.host}, port={self.config.port})"


__all__ = ["RedisCache", "RedisConfig"]
