"""TTLCache Codec - Key and Entry Transcoding.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import dataclasses
import logging
import types
from typing import (
    Any,
    Generic,
    Optional,
    Type,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from ttlcache_core.cache.entry import VALUE_FIELD, CacheEntry
from ttlcache_core.errors import CacheSerializationError
from ttlcache_core.protocol.serializer import Serializer, get_serializer

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


class CacheEntryCodec(Generic[K, V]):
    """Byte codec for keys and ``{expiresAt, value}`` entries.

    Keys are serialized on their own. Entries are serialized as one blob so
    a reader can re-check expiry independently of the store's own TTL.

    When ``value_type`` names a dataclass, values are written with
    ``dataclasses.asdict`` and rebuilt from the fields the class knows,
    following field annotations into nested dataclasses, ``Optional`` and
    list/tuple/dict fields. Fields added by newer writers are dropped rather
    than rejected.

    Keys round-trip only as far as the serializer does: JSON and msgpack
    turn a tuple key into a list on decode. Encoding is deterministic, so
    tuple keys still address the same store entry.

    Example:
        codec = CacheEntryCodec(MsgPackSerializer())
        blob = codec.encode_entry(CacheEntry(expires_at, {"id": 1}))
        entry = codec.decode_entry(blob)
    """

    def __init__(
        self,
        serializer: Optional[Serializer] = None,
        value_type: Optional[Type[V]] = None,
    ):
        """Initialize codec.

        Args:
            serializer: Byte serializer (defaults to JSON)
            value_type: Optional dataclass to rebuild values into
        """
        if value_type is not None and not dataclasses.is_dataclass(value_type):
            raise TypeError(f"value_type must be a dataclass, got {value_type!r}")
        self.serializer = serializer or get_serializer()
        self.value_type = value_type

    def encode_key(self, key: K) -> bytes:
        """Serialize a key."""
        return self._dump(key, "key")

    def decode_key(self, data: bytes) -> K:
        """Deserialize a key."""
        return self._load(data, "key")

    def encode_entry(self, entry: CacheEntry[V]) -> bytes:
        """Serialize an entry, expiry and value together."""
        row = entry.to_dict()
        row[VALUE_FIELD] = self._unwrap_value(entry.value)
        return self._dump(row, "entry")

    def decode_entry(self, data: bytes) -> CacheEntry[V]:
        """Deserialize an entry.

        Raises:
            CacheSerializationError: If the blob is not a valid entry
        """
        row = self._load(data, "entry")
        entry = CacheEntry.from_dict(row)
        if self.value_type is None or not isinstance(entry.value, dict):
            return entry
        return CacheEntry(expires_at=entry.expires_at, value=self._build_value(entry.value))

    def _unwrap_value(self, value: Any) -> Any:
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return dataclasses.asdict(value)
        return value

    def _build_value(self, row: dict) -> V:
        try:
            return self._build(self.value_type, row)
        except (TypeError, NameError) as e:
            raise CacheSerializationError(
                f"Cannot build {self.value_type.__name__} from cached value: {e}"
            ) from e

    def _build(self, tp: Any, data: Any) -> Any:
        """Rebuild ``data`` into the annotated type ``tp``, recursing into
        dataclass fields, ``Optional``/``Union`` members and containers."""
        if data is None:
            return None

        origin = get_origin(tp)
        args = get_args(tp)

        if origin in (Union, types.UnionType):
            members = [a for a in args if a is not type(None)]
            if isinstance(data, dict):
                for member in members:
                    if dataclasses.is_dataclass(member):
                        return self._build(member, data)
            return self._build(members[0], data) if len(members) == 1 else data

        if origin in (list, set, frozenset) and args and isinstance(data, list):
            return origin(self._build(args[0], item) for item in data)

        if origin is tuple and args and isinstance(data, (list, tuple)):
            if len(args) == 2 and args[1] is Ellipsis:
                return tuple(self._build(args[0], item) for item in data)
            return tuple(self._build(a, item) for a, item in zip(args, data))

        if origin is dict and len(args) == 2 and isinstance(data, dict):
            return {k: self._build(args[1], v) for k, v in data.items()}

        if isinstance(tp, type) and dataclasses.is_dataclass(tp) and isinstance(data, dict):
            # Fields unknown to this class are dropped at every level.
            hints = get_type_hints(tp)
            kwargs = {
                f.name: self._build(hints.get(f.name, Any), data[f.name])
                for f in dataclasses.fields(tp)
                if f.init and f.name in data
            }
            return tp(**kwargs)

        return data

    def _dump(self, obj: Any, what: str) -> bytes:
        try:
            return self.serializer.serialize(obj)
        except Exception as e:
            raise CacheSerializationError(
                f"Failed to encode {what} with {self.serializer.format_name}: {e}"
            ) from e

    def _load(self, data: bytes, what: str) -> Any:
        try:
            return self.serializer.deserialize(data)
        except Exception as e:
            logger.error(f"Failed to decode {what} with {self.serializer.format_name}: {e}")
            raise CacheSerializationError(
                f"Failed to decode {what} with {self.serializer.format_name}: {e}"
            ) from e

    def __repr__(self) -> str:
        value_type = self.value_type.__name__ if self.value_type else None
        return f"CacheEntryCodec(format={self.serializer.format_name}, value_type={value_type})"


__all__ = ["CacheEntryCodec"]
