"""Protocol module - Serialization and codecs."""

from ttlcache_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
    PickleSerializer,
    MsgPackSerializer,
    get_serializer,
    register_serializer,
)
from ttlcache_core.protocol.codec import CacheEntryCodec

__all__ = [
    "Serializer",
    "JSONSerializer",
    "PickleSerializer",
    "MsgPackSerializer",
    "get_serializer",
    "register_serializer",
    "CacheEntryCodec",
]
