"""Common type definitions for the dedup index.

Defines fundamental types used across all components.
"""

from __future__ import annotations

from typing import TypedDict

# Core primitive types
Payload = bytes
Offset = int
RequestID = int

# Largest request id accepted by the identifier adapter (unsigned 64-bit)
MAX_REQUEST_ID = 2**64 - 1


class FilterStats(TypedDict):
    """Administrative snapshot of a bloom filter's backing key."""
    key: str
    width: int
    hash_count: int
    version: int
    bits_set: int
    fill_ratio: float
    approximate_count: int
