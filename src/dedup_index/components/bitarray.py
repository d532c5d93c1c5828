"""In-process bit array and the offset validation shared by all backends."""

from __future__ import annotations

import threading
from collections.abc import Sequence

from ..core.errors import ConfigurationError, OffsetOutOfRangeError
from ..core.types import Offset


def check_offsets(offsets: Sequence[Offset], width: int) -> list[int]:
    """Validate every offset against width before anything is touched.

    Returns the offsets as plain ints. Raises OffsetOutOfRangeError on the
    first offset outside [0, width).
    """
    checked = []
    for offset in offsets:
        offset = int(offset)
        if not 0 <= offset < width:
            raise OffsetOutOfRangeError(offset, width)
        checked.append(offset)
    return checked


class MemoryBitArray:
    """Bit array held in process memory.

    Args:
        width: Number of addressable bit positions

    Invariants:
        - Each set_all/test_all holds the lock for the whole call, so a
          concurrent test_all never sees a partial set_all
        - Bit i lives in byte i // 8 at position i % 8
    """

    def __init__(self, width: int):
        if width <= 0:
            raise ConfigurationError(f"width must be positive, got {width}")
        self._width = width
        self._lock = threading.Lock()
        self._bits = bytearray((width + 7) // 8)

    @property
    def width(self) -> int:
        return self._width

    def set_all(self, offsets: Sequence[Offset]) -> None:
        """Set every offset to 1."""
        checked = check_offsets(offsets, self._width)
        with self._lock:
            for bit_pos in checked:
                self._bits[bit_pos // 8] |= 1 << (bit_pos % 8)

    def test_all(self, offsets: Sequence[Offset]) -> bool:
        """Return True only if every offset is set."""
        checked = check_offsets(offsets, self._width)
        with self._lock:
            for bit_pos in checked:
                if not self._bits[bit_pos // 8] & (1 << (bit_pos % 8)):
                    return False
        return True

    def delete(self) -> None:
        with self._lock:
            self._bits = bytearray(len(self._bits))

    def count(self) -> int:
        with self._lock:
            return sum(bin(byte).count("1") for byte in self._bits)
