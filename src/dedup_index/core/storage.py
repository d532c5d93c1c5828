"""Redis-backed storage used by a crawl scheduler.

RedisStorage keeps exact-match visited keys, per-host cookies and a FIFO
request queue under one namespace prefix. RedisBloomStorage replaces the
exact-match visited keys with a shared bloom filter so memory stays bounded
no matter how many requests are recorded.
"""

from __future__ import annotations

import logging
import math
import threading

import redis

from ..components.bloom import BloomFilter
from ..components.redis_bitarray import RedisBitArray
from ..components.visited import VisitedFilter
from .config import DEFAULT_FILTER_PARAMS, FilterParams, StorageConfig
from .errors import DedupIndexError, StorageConnectionError
from .keys import KeySpace
from .types import FilterStats, RequestID

logger = logging.getLogger(__name__)

_NOT_INITIALIZED = "Storage is not initialized; call init() first"


class RedisStorage:
    """Exact-match storage for visited requests, cookies and the request queue.

    Args:
        config: Connection and namespace settings
        client: Optional pre-built client. When omitted, init() builds one on
            its own connection pool and close() releases it.

    Public API:
        - init() / close(): connection lifecycle, also via ``with``
        - visited(id) / is_visited(id): exact-match request bookkeeping
        - set_cookies(host, cookies) / cookies(host)
        - add_request(r) / get_request() / queue_size()
        - clear(): delete every key this storage owns under the prefix
    """

    def __init__(self, config: StorageConfig, client: redis.Redis | None = None):
        self.config = config
        self.keys = KeySpace(config.prefix)
        self.client = client
        self._pool: redis.ConnectionPool | None = None
        # Serializes cookie writes and clear() within this process
        self._lock = threading.Lock()

    def init(self) -> None:
        """Connect to Redis and verify the connection."""
        if self.client is None:
            self._pool = redis.ConnectionPool(
                connection_class=redis.SSLConnection if self.config.ssl else redis.Connection,
                host=self.config.host,
                port=self.config.port,
                username=self.config.username or None,
                password=self.config.password or None,
                db=self.config.db,
                socket_timeout=self.config.socket_timeout,
            )
            self.client = redis.Redis(connection_pool=self._pool)
        try:
            self.client.ping()
        except redis.RedisError as e:
            raise StorageConnectionError(f"Redis connection error: {e}") from e
        logger.info(f"Connected to Redis at {self.config.address} db={self.config.db} prefix={self.config.prefix!r}")

    def close(self) -> None:
        """Release the connection pool if this storage created it."""
        if self._pool is not None:
            logger.info("Closing Redis storage")
            self._pool.disconnect()
            self._pool = None
            self.client = None

    def __enter__(self):
        self.init()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _require_client(self) -> redis.Redis:
        if self.client is None:
            raise DedupIndexError(_NOT_INITIALIZED)
        return self.client

    def visited(self, request_id: RequestID) -> None:
        """Mark request_id as visited, expiring after config.expires if set."""
        px = math.ceil(self.config.expires * 1000) if self.config.expires else None
        self._require_client().set(self.keys.request(request_id), "1", px=px)

    def is_visited(self, request_id: RequestID) -> bool:
        return self._require_client().exists(self.keys.request(request_id)) > 0

    def set_cookies(self, host: str, cookies: str) -> None:
        """Replace the cookies stored for host."""
        client = self._require_client()
        # Keeps clear() from interleaving with writes in this process only;
        # concurrent writers for one host still resolve as last write wins
        with self._lock:
            client.set(self.keys.cookie(host), cookies)

    def cookies(self, host: str) -> str:
        """Return cookies stored for host, empty string if none."""
        value = self._require_client().get(self.keys.cookie(host))
        if value is None:
            return ""
        return value.decode("utf-8") if isinstance(value, bytes) else value

    def add_request(self, request: bytes) -> None:
        self._require_client().rpush(self.keys.queue, request)

    def get_request(self) -> bytes | None:
        """Pop the oldest queued request, or None if the queue is empty."""
        return self._require_client().lpop(self.keys.queue)

    def queue_size(self) -> int:
        return int(self._require_client().llen(self.keys.queue))

    def _owned_keys(self) -> list[str]:
        """Fixed keys (not found by pattern scans) removed by clear()."""
        return [self.keys.queue]

    def clear(self) -> None:
        """Delete cookie keys, request keys and the queue under the prefix."""
        client = self._require_client()
        with self._lock:
            keys = list(client.scan_iter(match=self.keys.cookie_pattern))
            keys.extend(client.scan_iter(match=self.keys.request_pattern))
            keys.extend(self._owned_keys())
            client.delete(*keys)
        logger.info(f"Cleared {len(keys)} keys under prefix {self.config.prefix!r}")


class RedisBloomStorage(RedisStorage):
    """RedisStorage whose visited bookkeeping goes through a shared bloom filter.

    Args:
        config: Connection and namespace settings
        client: Optional pre-built client
        params: Filter identity; every process sharing the prefix must use
            the same value

    The filter lives in the single key ``<prefix>:bloom``. reset() deletes
    only that key; clear() deletes it together with everything RedisStorage
    owns.
    """

    def __init__(
        self,
        config: StorageConfig,
        client: redis.Redis | None = None,
        params: FilterParams = DEFAULT_FILTER_PARAMS,
    ):
        super().__init__(config, client)
        self.params = params
        self.bloom: BloomFilter | None = None
        self._visited: VisitedFilter | None = None

    def init(self) -> None:
        super().init()
        if self.bloom is None:
            bit_array = RedisBitArray(self.client, self.keys.bloom, self.params.width)
            self.bloom = BloomFilter(bit_array, self.params)
            self._visited = VisitedFilter(self.bloom)
            logger.info(
                f"Bound bloom filter {self.keys.bloom} "
                f"(width={self.params.width}, hash_count={self.params.hash_count})"
            )

    def close(self) -> None:
        super().close()
        self.bloom = None
        self._visited = None

    def _require_filter(self) -> VisitedFilter:
        if self._visited is None:
            raise DedupIndexError(_NOT_INITIALIZED)
        return self._visited

    def visited(self, request_id: RequestID) -> None:
        self._require_filter().mark_visited(request_id)

    def is_visited(self, request_id: RequestID) -> bool:
        return self._require_filter().is_visited(request_id)

    def reset(self) -> None:
        """Delete the bloom filter key, leaving cookies and the queue alone."""
        self._require_filter().reset()

    def _owned_keys(self) -> list[str]:
        return super()._owned_keys() + [self.keys.bloom]

    def stats(self) -> FilterStats:
        """Return an administrative snapshot of the filter key."""
        bloom = self.bloom
        if bloom is None:
            raise DedupIndexError(_NOT_INITIALIZED)
        bits_set = bloom.bit_array.count()
        return FilterStats(
            key=self.keys.bloom,
            width=self.params.width,
            hash_count=self.params.hash_count,
            version=self.params.version,
            bits_set=bits_set,
            fill_ratio=bits_set / self.params.width,
            approximate_count=bloom.estimate_elements(bits_set),
        )
