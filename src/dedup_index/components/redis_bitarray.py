"""Bit array stored in a single Redis string key.

Multi-offset operations run as Lua scripts so that the offsets touched by one
call are set or read without interleaving against other clients.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import redis

from ..core.errors import ConfigurationError
from ..core.types import Offset
from .bitarray import check_offsets

logger = logging.getLogger(__name__)

# Sets every offset in ARGV to 1. Idempotent; nothing is read.
SET_SCRIPT = """
for _, offset in ipairs(ARGV) do
    redis.call("SETBIT", KEYS[1], offset, 1)
end
"""

# Returns false on the first unset offset, true if all are set.
# GETBIT on a missing key reads 0, so an absent array tests false.
TEST_SCRIPT = """
for _, offset in ipairs(ARGV) do
    if tonumber(redis.call("GETBIT", KEYS[1], offset)) == 0 then
        return false
    end
end
return true
"""


class RedisBitArray:
    """Shared bit array backed by one Redis key.

    Args:
        client: Redis client; its connection pool is shared by all calls
        key: The Redis key holding the bit string
        width: Number of addressable bit positions

    Invariants:
        - Offsets are validated locally; an out-of-range offset never
          reaches the server
        - Redis errors propagate untranslated and are never retried here
    """

    def __init__(self, client: redis.Redis, key: str, width: int):
        if width <= 0:
            raise ConfigurationError(f"width must be positive, got {width}")
        self.client = client
        self.key = key
        self._width = width
        self._set_script = client.register_script(SET_SCRIPT)
        self._test_script = client.register_script(TEST_SCRIPT)

    @property
    def width(self) -> int:
        return self._width

    def set_all(self, offsets: Sequence[Offset]) -> None:
        """Set every offset to 1 in one script call."""
        args = check_offsets(offsets, self._width)
        self._set_script(keys=[self.key], args=args)

    def test_all(self, offsets: Sequence[Offset]) -> bool:
        """Return True only if every offset is set, in one script call."""
        args = check_offsets(offsets, self._width)
        # Lua false comes back as a nil reply (None), true as 1
        result = self._test_script(keys=[self.key], args=args)
        return result == 1

    def delete(self) -> None:
        logger.info(f"Deleting bit array {self.key}")
        self.client.delete(self.key)

    def count(self) -> int:
        return int(self.client.bitcount(self.key))
