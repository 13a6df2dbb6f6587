"""Integration tests for RedisCache against a real server.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Set TTLCACHE_TEST_REDIS_URL (e.g. redis://localhost:6379/15) to run.
"""

import asyncio
import os
import time
import uuid
from datetime import timedelta

import pytest

from ttlcache_core.cache.entry import utcnow
from ttlcache_core.errors import CacheTransportError
from ttlcache_core.store.redis import RedisCache, RedisConfig

REDIS_URL = os.getenv("TTLCACHE_TEST_REDIS_URL")

pytestmark = pytest.mark.skipif(REDIS_URL is None, reason="TTLCACHE_TEST_REDIS_URL is not set")


def _run(coro):
    return asyncio.run(coro)


def _config(**overrides):
    prefix = f"itest:{uuid.uuid4().hex}:".encode()
    return RedisConfig(url=REDIS_URL, prefix=prefix, **overrides)


class TestRedisIntegration:
    """Tests against a live Redis."""

    def test_put_get_overwrite(self):
        """Test read-your-writes and overwrite."""
        async def scenario():
            async with RedisCache(_config(default_ttl=5)) as cache:
                assert await cache.get("missing") is None
                await cache.put("k", {"v": 1, "opt": None})
                first = await cache.get("k")
                await cache.put("k", {"v": 2})
                return first, await cache.get("k")

        assert _run(scenario()) == ({"v": 1, "opt": None}, {"v": 2})

    def test_put_if_absent(self):
        """Test conditional write against an existing key."""
        async def scenario():
            async with RedisCache(_config(default_ttl=5)) as cache:
                await cache.put("k", "a")
                stored = await cache.put_if_absent("k", "b")
                return stored, await cache.get("k")

        assert _run(scenario()) == (False, "a")

    def test_default_ttl_expiry(self):
        """Test entries disappear once the default TTL passes."""
        async def scenario():
            async with RedisCache(_config(default_ttl=1)) as cache:
                await cache.put("k", "v")
                await asyncio.sleep(0.1)
                early = await cache.get("k")
                await asyncio.sleep(1.0)
                return early, await cache.get("k")

        assert _run(scenario()) == ("v", None)

    def test_explicit_expiry(self):
        """Test explicit absolute expiry."""
        async def scenario():
            async with RedisCache(_config(default_ttl=30)) as cache:
                await cache.put("k", "v", expires_at=utcnow() + timedelta(milliseconds=500))
                await asyncio.sleep(0.7)
                return await cache.get("k")

        assert _run(scenario()) is None

    def test_put_if_absent_single_winner(self):
        """Test racing conditional writes on one connection yield one winner."""
        async def scenario():
            async with RedisCache(_config(default_ttl=5)) as cache:
                results = await asyncio.gather(
                    *(cache.put_if_absent("race", n) for n in range(25))
                )
                return results, await cache.get("race")

        results, stored = _run(scenario())

        assert results.count(True) == 1
        assert stored == results.index(True)

    def test_put_if_absent_across_instances(self):
        """Test two engines sharing the store see one winner."""
        config = _config(default_ttl=5)

        async def scenario():
            async with RedisCache(config) as a, RedisCache(config) as b:
                return await asyncio.gather(
                    a.put_if_absent("shared", "a"),
                    b.put_if_absent("shared", "b"),
                )

        assert sorted(_run(scenario())) == [False, True]


class TestRedisUnreachable:
    """Tests for an unreachable server."""

    def test_connect_refused(self):
        """Test a closed port surfaces as a transport error."""
        cache = RedisCache(RedisConfig(port=1, socket_connect_timeout=0.5))
        start = time.monotonic()

        with pytest.raises(CacheTransportError):
            _run(cache.get("k"))

        assert time.monotonic() - start < 5


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
