"""Protocol definitions for the storage surface used by a crawl scheduler."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..core.types import RequestID


@runtime_checkable
class VisitedStorage(Protocol):
    """Records which requests have already been issued."""

    def visited(self, request_id: RequestID) -> None:
        """Mark request_id as visited."""
        ...

    def is_visited(self, request_id: RequestID) -> bool:
        """Return True if request_id was marked visited."""
        ...


@runtime_checkable
class CookieStorage(Protocol):
    """Per-host cookie persistence."""

    def set_cookies(self, host: str, cookies: str) -> None:
        """Replace the serialized cookies stored for host."""
        ...

    def cookies(self, host: str) -> str:
        """Return serialized cookies for host, empty string if none."""
        ...


@runtime_checkable
class QueueStorage(Protocol):
    """FIFO queue of serialized requests."""

    def add_request(self, request: bytes) -> None:
        """Append a serialized request to the tail of the queue."""
        ...

    def get_request(self) -> bytes | None:
        """Pop the head of the queue; None when the queue is empty."""
        ...

    def queue_size(self) -> int:
        """Return the number of queued requests."""
        ...
