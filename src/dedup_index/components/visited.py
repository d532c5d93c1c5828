"""Request id adapter over the bloom filter.

Request ids are unsigned 64-bit integers encoded as 8 little-endian bytes
before hashing. The encoding is part of the filter format.
"""

from __future__ import annotations

import struct

from ..core.errors import InvalidRequestIDError
from ..core.types import MAX_REQUEST_ID, RequestID
from ..interfaces.bloom import MembershipFilter

_REQUEST_ID_FORMAT = struct.Struct("<Q")


def encode_request_id(request_id: RequestID) -> bytes:
    """Encode request_id as 8 little-endian bytes."""
    if isinstance(request_id, bool) or not isinstance(request_id, int):
        raise InvalidRequestIDError(f"Request id must be an int, got {type(request_id).__name__}")
    if not 0 <= request_id <= MAX_REQUEST_ID:
        raise InvalidRequestIDError(f"Request id {request_id} does not fit in 64 unsigned bits")
    return _REQUEST_ID_FORMAT.pack(request_id)


class VisitedFilter:
    """Visited/is-visited bookkeeping for request ids.

    Args:
        bloom: Filter that stores the encoded ids
    """

    def __init__(self, bloom: MembershipFilter):
        self._bloom = bloom

    def mark_visited(self, request_id: RequestID) -> None:
        self._bloom.add(encode_request_id(request_id))

    def is_visited(self, request_id: RequestID) -> bool:
        return self._bloom.exists(encode_request_id(request_id))

    def reset(self) -> None:
        self._bloom.clear()
