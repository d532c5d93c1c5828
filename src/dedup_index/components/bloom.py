"""Bloom filter over a shared bit array.

The filter owns the sizing parameters and the hash scheme; the bit array owns
storage and atomicity. Adds commute (setting a bit is idempotent), so any
number of processes can add to the same filter without coordination.
"""

from __future__ import annotations

import logging
import math

from ..core.config import DEFAULT_FILTER_PARAMS, FilterParams
from ..core.types import Offset, Payload
from ..interfaces.bitarray import BitArray
from .hashing import HashLocator

logger = logging.getLogger(__name__)


class BloomFilter:
    """Probabilistic set membership test over a shared bit array.

    Args:
        bit_array: Backend holding the bits; validates every offset
        params: Filter identity (width, hash_count). Must stay the same for
            the lifetime of the data stored in bit_array.

    Invariants:
        - False positives are possible
        - False negatives are not possible for adds that completed before
          the exists call began
        - width and hash_count are fixed at creation time
    """

    def __init__(self, bit_array: BitArray, params: FilterParams = DEFAULT_FILTER_PARAMS):
        self.bit_array = bit_array
        self.params = params
        self._locator = HashLocator(params.width, params.hash_count)

    @property
    def width(self) -> int:
        return self.params.width

    @property
    def hash_count(self) -> int:
        return self.params.hash_count

    def locations(self, payload: Payload) -> list[Offset]:
        """Return the bit offsets payload maps to."""
        return self._locator.locate(payload)

    def add(self, payload: Payload) -> None:
        """Add payload to the filter."""
        self.bit_array.set_all(self.locations(payload))

    def exists(self, payload: Payload) -> bool:
        """Return True if payload may be present; False if definitely absent."""
        return self.bit_array.test_all(self.locations(payload))

    def __contains__(self, payload: Payload) -> bool:
        return self.exists(payload)

    def clear(self) -> None:
        """Delete every bit. Only for explicit administrative resets."""
        logger.info("Clearing bloom filter")
        self.bit_array.delete()

    def approximate_count(self) -> int:
        """Estimate how many distinct payloads have been added."""
        return self.estimate_elements(self.bit_array.count())

    def estimate_elements(self, bits_set: int) -> int:
        """Estimate distinct adds from a set-bit count.

        n ~= -(m / k) * ln(1 - X / m), with X the number of set bits.
        """
        m = self.params.width
        if bits_set >= m:
            return m
        return int(round(-(m / self.params.hash_count) * math.log(1.0 - bits_set / m)))
