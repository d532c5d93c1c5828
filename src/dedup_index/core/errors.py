"""Exception hierarchy for the dedup index.

Redis client errors raised while talking to the backing store are not part of
this hierarchy; they propagate to the caller as ``redis.exceptions.RedisError``.
"""

from __future__ import annotations


class DedupIndexError(Exception):
    """Base exception for all dedup index errors."""
    pass


class ConfigurationError(DedupIndexError, ValueError):
    """Raised when filter parameters or storage settings are invalid."""
    pass


class OffsetOutOfRangeError(ConfigurationError):
    """Raised when a bit offset falls outside ``[0, width)``.

    Signals a mis-sized filter or a programming defect. Nothing is written to
    the bit array when this is raised.
    """

    def __init__(self, offset: int, width: int):
        super().__init__(f"Bit offset {offset} out of range for width {width}")
        self.offset = offset
        self.width = width


class InvalidRequestIDError(DedupIndexError, ValueError):
    """Raised when a request id does not fit in an unsigned 64-bit integer."""
    pass


class StorageConnectionError(DedupIndexError):
    """Raised when the backing store cannot be reached during init."""
    pass
