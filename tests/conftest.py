"""Shared fixtures for cache tests.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import asyncio
import time
from datetime import datetime, timedelta, timezone

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from ttlcache_core.cache.entry import utcnow


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


class FakeRedis:
    """In-process stand-in for redis.asyncio.Redis.

    Supports GET, SET with NX/PXAT, PING and aclose. Expiry follows the
    wall clock, like a real server.
    """

    def __init__(self):
        self.data = {}
        self.set_calls = []
        self.closed = False

    def _live(self, name):
        row = self.data.get(name)
        if row is not None and row[1] is not None and row[1] <= int(time.time() * 1000):
            del self.data[name]
            return None
        return row

    async def get(self, name):
        await asyncio.sleep(0)
        row = self._live(name)
        return None if row is None else row[0]

    async def set(self, name, value, nx=False, pxat=None, **kwargs):
        self.set_calls.append({"name": name, "value": value, "nx": nx, "pxat": pxat})
        # Let racing writers interleave before the atomic part.
        await asyncio.sleep(0)
        if nx and self._live(name) is not None:
            return None
        self.data[name] = (value, pxat)
        return True

    async def ping(self):
        return True

    async def aclose(self):
        self.closed = True


class FailingRedis:
    """Client whose every command fails as if the server were down."""

    async def get(self, name):
        raise RedisConnectionError("Connection refused")

    async def set(self, name, value, **kwargs):
        raise RedisConnectionError("Connection refused")

    async def ping(self):
        raise RedisConnectionError("Connection refused")

    async def aclose(self):
        pass


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wall_clock():
    """Fake clock starting at the real current time."""
    return FakeClock(utcnow())


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def failing_redis():
    return FailingRedis()
