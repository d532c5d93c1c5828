"""Protocol definition for a membership filter."""

from __future__ import annotations

from typing import Protocol

from ..core.types import Payload


class MembershipFilter(Protocol):
    """Probabilistic set membership test over byte payloads."""

    def add(self, payload: Payload) -> None:
        """Add payload to the filter."""
        ...

    def exists(self, payload: Payload) -> bool:
        """Return True if payload may be present; False if definitely absent."""
        ...

    def clear(self) -> None:
        """Remove every member."""
        ...
