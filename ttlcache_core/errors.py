"""TTLCache Errors - Error Taxonomy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A missing or expired key is never an error: engines report it as ``None``.
Everything else surfaces as one of the exceptions below.
"""

from __future__ import annotations


class CacheError(Exception):
    """Base class for cache failures."""


class CacheKeyError(CacheError, ValueError):
    """Raised synchronously when a caller passes an unusable key."""


class CacheTransportError(CacheError):
    """Raised when the remote store cannot be reached or replies badly."""


class CacheSerializationError(CacheError):
    """Raised when a key or entry cannot be encoded or decoded."""


def require_key(key: object) -> None:
    """Fail fast on a ``None`` key.

    Raises:
        CacheKeyError: If key is None
    """
    if key is None:
        raise CacheKeyError("Cache key must not be None")


__all__ = [
    "CacheError",
    "CacheKeyError",
    "CacheTransportError",
    "CacheSerializationError",
    "require_key",
]
