"""Dedup index core: configuration, key layout and storage."""

from .storage import RedisBloomStorage, RedisStorage

__all__ = ["RedisStorage", "RedisBloomStorage"]
