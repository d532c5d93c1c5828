"""Protocol definition for a shared bit array."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..core.types import Offset


@runtime_checkable
class BitArray(Protocol):
    """Fixed-width array of single bits addressed by offset."""

    @property
    def width(self) -> int:
        """Number of addressable bit positions."""
        ...

    def set_all(self, offsets: Sequence[Offset]) -> None:
        """Set every offset to 1 atomically.

        A concurrent test_all observes either none or all of these offsets.
        Raises OffsetOutOfRangeError before mutating anything if any offset
        is outside [0, width).
        """
        ...

    def test_all(self, offsets: Sequence[Offset]) -> bool:
        """Return True only if every offset is set. Absent array reads as all zero."""
        ...

    def delete(self) -> None:
        """Drop every bit (administrative reset)."""
        ...

    def count(self) -> int:
        """Return the number of bits currently set."""
        ...
