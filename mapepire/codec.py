"""Request-id allocation."""

from __future__ import annotations

import os
import threading
import time

RequestId = str

_U64 = 1 << 64


class IdAllocator:
    """Issues increasing request ids behind a per-instance hex prefix.

    The prefix mixes the sub-second clock with the process id so that
    separate allocators rarely share one. Ids have the form
    ``<12-hex-prefix>-<counter>``.
    """

    def __init__(self) -> None:
        nanos = time.time_ns() % 1_000_000_000
        pid = os.getpid() & 0xFFFF
        raw = nanos.to_bytes(4, "little") + pid.to_bytes(2, "little")
        self._prefix = raw.hex()
        self._counter = 0
        self._lock = threading.Lock()

    def prefix(self) -> str:
        """Return this allocator's id prefix."""
        return self._prefix

    def next(self) -> RequestId:
        """Issue the next id."""
        with self._lock:
            n = self._counter
            self._counter = (n + 1) % _U64
        return f"{self._prefix}-{n}"

    def __repr__(self) -> str:
        return f"IdAllocator(prefix={self._prefix!r}, counter={self._counter})"