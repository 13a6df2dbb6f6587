"""TTLCache Entry - Expiring Cache Entry.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Generic, Optional, TypeVar

from ttlcache_core.errors import CacheSerializationError

V = TypeVar("V")

EXPIRES_AT_FIELD = "expiresAt"
VALUE_FIELD = "value"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utcnow() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Normalize a datetime to aware UTC. Naive values are taken as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def resolve_expiry(
    expires_at: Optional[datetime],
    default_ttl: timedelta,
    now: Optional[datetime] = None,
) -> datetime:
    """Resolve the absolute expiry for one write.

    Args:
        expires_at: Explicit expiry, if the caller gave one
        default_ttl: TTL applied when no explicit expiry is given
        now: Reference instant (defaults to the current time)

    Returns:
        Aware UTC expiry instant
    """
    if expires_at is not None:
        return as_utc(expires_at)
    return (now or utcnow()) + default_ttl


def to_epoch_millis(moment: datetime) -> int:
    """Convert an instant to integer epoch milliseconds."""
    return (as_utc(moment) - EPOCH) // timedelta(milliseconds=1)


def truncate_to_millis(moment: datetime) -> datetime:
    """Drop sub-millisecond precision, matching store expiry granularity."""
    return moment.replace(microsecond=moment.microsecond - moment.microsecond % 1000)


def _parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, bool):
        raise CacheSerializationError(f"Invalid {EXPIRES_AT_FIELD}: {raw!r}")
    if isinstance(raw, (int, float)):
        return EPOCH + timedelta(milliseconds=raw)
    if isinstance(raw, str):
        text = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
        try:
            return as_utc(datetime.fromisoformat(text))
        except ValueError as e:
            raise CacheSerializationError(f"Invalid {EXPIRES_AT_FIELD}: {raw!r}") from e
    raise CacheSerializationError(f"Invalid {EXPIRES_AT_FIELD}: {raw!r}")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """A value paired with the instant after which it is no longer valid.

    Attributes:
        expires_at: Aware UTC expiry instant
        value: Cached payload
    """

    expires_at: datetime
    value: V

    def __post_init__(self):
        object.__setattr__(self, "expires_at", as_utc(self.expires_at))

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """True once ``now`` is strictly after the expiry."""
        return (now or utcnow()) > self.expires_at

    def is_stale(self, now: Optional[datetime] = None) -> bool:
        """True once ``now`` has reached the expiry.

        Used by sweeps and by read-time filtering of remote entries, which
        drop an entry at its expiry instant rather than just after it.
        """
        return (now or utcnow()) >= self.expires_at

    def remaining(self, now: Optional[datetime] = None) -> timedelta:
        """Time left before expiry, never negative."""
        left = self.expires_at - (now or utcnow())
        return max(left, timedelta(0))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire dictionary.

        Returns:
            ``{"expiresAt": <ISO-8601>, "value": value}``
        """
        return {
            EXPIRES_AT_FIELD: self.expires_at.isoformat(timespec="microseconds"),
            VALUE_FIELD: self.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheEntry":
        """Create from the wire dictionary.

        ``expiresAt`` may be ISO-8601 or epoch milliseconds. Unknown keys are
        ignored.

        Raises:
            CacheSerializationError: If a required field is missing or invalid
        """
        if not isinstance(data, dict):
            raise CacheSerializationError(
                f"Expected an entry mapping, got {type(data).__name__}"
            )
        if EXPIRES_AT_FIELD not in data:
            raise CacheSerializationError(f"Entry is missing {EXPIRES_AT_FIELD!r}")

        return cls(
            expires_at=_parse_timestamp(data[EXPIRES_AT_FIELD]),
            value=data.get(VALUE_FIELD),
        )

    def __repr__(self) -> str:
        return f"CacheEntry(expires_at={self.expires_at.isoformat()}, value={self.value!r})"


__all__ = [
    "CacheEntry",
    "utcnow",
    "as_utc",
    "resolve_expiry",
    "to_epoch_millis",
    "truncate_to_millis",
]
