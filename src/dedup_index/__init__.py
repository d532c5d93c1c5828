"""Dedup index - shared Redis-backed bloom filter for crawl request ids."""

from .core.config import DEFAULT_FILTER_PARAMS, FilterParams, StorageConfig
from .core.errors import (
    DedupIndexError,
    ConfigurationError,
    OffsetOutOfRangeError,
    InvalidRequestIDError,
    StorageConnectionError,
)
from .core.keys import KeySpace
from .core.storage import RedisBloomStorage, RedisStorage
from .core.types import FilterStats, Offset, Payload, RequestID
from .components.bitarray import MemoryBitArray
from .components.bloom import BloomFilter
from .components.hashing import HashLocator
from .components.redis_bitarray import RedisBitArray
from .components.visited import VisitedFilter, encode_request_id

__all__ = [
    "FilterParams",
    "DEFAULT_FILTER_PARAMS",
    "StorageConfig",
    "KeySpace",
    "RedisStorage",
    "RedisBloomStorage",
    "DedupIndexError",
    "ConfigurationError",
    "OffsetOutOfRangeError",
    "InvalidRequestIDError",
    "StorageConnectionError",
    "FilterStats",
    "Offset",
    "Payload",
    "RequestID",
    "BloomFilter",
    "HashLocator",
    "MemoryBitArray",
    "RedisBitArray",
    "VisitedFilter",
    "encode_request_id",
]
