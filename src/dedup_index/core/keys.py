"""Redis key layout for one crawl namespace.

Every key is ``<prefix>:<kind>[:<id>]``. The bloom filter owns exactly one key,
``<prefix>:bloom``, which can be deleted independently of the exact-match keys.
"""

from __future__ import annotations

from dataclasses import dataclass

from .types import RequestID

SEPARATOR = ":"


@dataclass(frozen=True)
class KeySpace:
    """Derives every key used under one namespace prefix."""

    prefix: str = ""

    def _join(self, *parts: str) -> str:
        return SEPARATOR.join((self.prefix, *parts))

    @property
    def bloom(self) -> str:
        return self._join("bloom")

    @property
    def queue(self) -> str:
        return self._join("queue")

    def request(self, request_id: RequestID) -> str:
        return self._join("request", str(request_id))

    def cookie(self, host: str) -> str:
        return self._join("cookie", host)

    @property
    def request_pattern(self) -> str:
        return self._join("request", "*")

    @property
    def cookie_pattern(self) -> str:
        return self._join("cookie", "*")
