"""Configuration for the dedup index.

Two kinds of settings live here and they must not be confused:

- ``FilterParams`` is the persisted identity of a bloom filter. Once bits have
  been written under a key with a given ``(width, hash_count)`` pair, changing
  either value makes every earlier membership answer unreliable (false
  negatives). A deployment commits to one pair and rebuilds the filter from
  source data to migrate.
- ``StorageConfig`` is ordinary runtime configuration for reaching Redis.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from .errors import ConfigurationError

# Redis bit strings are capped at 512 MB, i.e. 2**32 addressable bits
MAX_WIDTH = 2**32
# The hash discriminator is a single byte
MAX_HASH_COUNT = 256

# Sizing policy: ~20 bits per expected element with 14 hashes gives
# a false positive rate of about 6.7e-5
BITS_PER_ELEMENT = 20
DEFAULT_HASH_COUNT = 14

FILTER_FORMAT_VERSION = 1


@dataclass(frozen=True)
class FilterParams:
    """Sizing parameters that define a bloom filter's on-store format.

    Attributes:
        width: Total number of addressable bit positions
        hash_count: Number of bit positions derived per payload
        version: Format version; bump when the hash scheme changes
    """

    width: int
    hash_count: int = DEFAULT_HASH_COUNT
    version: int = FILTER_FORMAT_VERSION

    def __post_init__(self) -> None:
        if not 0 < self.width <= MAX_WIDTH:
            raise ConfigurationError(
                f"width must be in [1, {MAX_WIDTH}], got {self.width}"
            )
        if not 0 < self.hash_count <= MAX_HASH_COUNT:
            raise ConfigurationError(
                f"hash_count must be in [1, {MAX_HASH_COUNT}], got {self.hash_count}"
            )

    @classmethod
    def for_capacity(cls, expected_elements: int) -> FilterParams:
        """Size a filter for ``expected_elements`` using the standard ratio."""
        if expected_elements <= 0:
            expected_elements = 1
        return cls(
            width=min(MAX_WIDTH, BITS_PER_ELEMENT * expected_elements),
            hash_count=DEFAULT_HASH_COUNT,
        )

    def false_positive_rate(self, elements: int) -> float:
        """Expected false positive rate after ``elements`` distinct adds.

        p = (1 - e^(-k*n/m))^k
        """
        if elements <= 0:
            return 0.0
        k = self.hash_count
        return (1.0 - math.exp(-k * elements / self.width)) ** k


DEFAULT_FILTER_PARAMS = FilterParams(width=MAX_WIDTH, hash_count=DEFAULT_HASH_COUNT)


@dataclass
class StorageConfig:
    """Connection settings for the Redis-backed storage.

    Attributes:
        address: Redis server address as ``host:port``
        username: ACL user name (Redis 6+), empty for the default user
        password: Password for the Redis server, empty for none
        db: Logical Redis database number
        prefix: Namespace prefix for every key; lets independent crawls share
            one database
        expires: Expiry in seconds for exact-match visited keys, None to keep
            them forever
        socket_timeout: Socket timeout in seconds; timeouts surface as redis
            errors from the call that hit them
        ssl: Connect over TLS (``rediss://`` URLs)
    """

    address: str = "127.0.0.1:6379"
    username: str = ""
    password: str = ""
    db: int = 0
    prefix: str = ""
    expires: float | None = None
    socket_timeout: float | None = None
    ssl: bool = False

    def __post_init__(self) -> None:
        if self.expires is not None and self.expires <= 0:
            raise ConfigurationError(f"expires must be positive or None, got {self.expires}")

    @property
    def host(self) -> str:
        host, _, _ = self.address.rpartition(":")
        return host or self.address

    @property
    def port(self) -> int:
        _, sep, port = self.address.rpartition(":")
        if not sep:
            return 6379
        try:
            return int(port)
        except ValueError as e:
            raise ConfigurationError(f"Invalid port in address {self.address!r}") from e

    @classmethod
    def from_url(cls, url: str, prefix: str = "", **kwargs) -> StorageConfig:
        """Build a config from a ``redis[s]://[[user]:password@]host[:port][/db]`` URL."""
        parts = urlsplit(url)
        if parts.scheme not in ("redis", "rediss", ""):
            raise ConfigurationError(f"Unsupported URL scheme: {parts.scheme!r}")
        path = parts.path.strip("/")
        try:
            db = int(path) if path else 0
        except ValueError as e:
            raise ConfigurationError(f"Invalid database in URL: {path!r}") from e
        return cls(
            address=f"{parts.hostname or '127.0.0.1'}:{parts.port or 6379}",
            username=unquote(parts.username or ""),
            password=unquote(parts.password or ""),
            db=db,
            prefix=prefix,
            ssl=parts.scheme == "rediss",
            **kwargs,
        )

    @classmethod
    def from_env(cls) -> StorageConfig:
        """Build a config from ``REDIS_URL`` and ``DEDUP_PREFIX``."""
        return cls.from_url(
            os.environ.get("REDIS_URL", "redis://127.0.0.1:6379/0"),
            prefix=os.environ.get("DEDUP_PREFIX", ""),
        )
