"""Bit position derivation for the bloom filter.

Each of the ``hash_count`` positions comes from one 64-bit MurmurHash3 of the
payload with a single discriminator byte appended, reduced modulo ``width``.
The scheme is part of the filter's persisted format: the low 64 bits of
MurmurHash3 x64/128 with seed 0 match filters already written by other
deployments sharing the key.
"""

from __future__ import annotations

import mmh3

from ..core.config import MAX_HASH_COUNT
from ..core.errors import ConfigurationError
from ..core.types import Offset, Payload


def hash64(data: bytes) -> int:
    """Return the unsigned low 64 bits of MurmurHash3 x64/128 (seed 0)."""
    return mmh3.hash64(data, seed=0, signed=False)[0]


class HashLocator:
    """Maps a payload to ``hash_count`` bit offsets in ``[0, width)``.

    Args:
        width: Number of addressable bit positions
        hash_count: Number of offsets per payload (at most 256)

    Invariants:
        - Same payload always yields the same offsets in the same order
        - Offsets may repeat; no uniqueness is guaranteed
    """

    def __init__(self, width: int, hash_count: int):
        if width <= 0:
            raise ConfigurationError(f"width must be positive, got {width}")
        if not 0 < hash_count <= MAX_HASH_COUNT:
            raise ConfigurationError(
                f"hash_count must be in [1, {MAX_HASH_COUNT}], got {hash_count}"
            )
        self.width = width
        self.hash_count = hash_count

    def locate(self, payload: Payload) -> list[Offset]:
        """Return the ordered bit offsets for payload."""
        return [
            hash64(payload + bytes((i,))) % self.width
            for i in range(self.hash_count)
        ]
