"""Per-key sliding-window rate limiting."""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable

from ..exceptions import RateLimitExceeded


class SlidingWindowRateLimiter:
    """At most ``max_requests`` per key within any ``window_seconds`` span.

    Thread-safe. Keys whose timestamps have all expired are pruned on every
    check so the table does not grow without bound.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        for key in list(self._hits):
            hits = self._hits[key]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self._hits[key]

    def allow(self, key: str) -> bool:
        """Record a request for ``key`` if it fits in the window."""
        with self._lock:
            now = self._clock()
            self._prune(now)
            hits = self._hits.setdefault(key, deque())
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True

    def check(self, key: str) -> None:
        """Raises:
            RateLimitExceeded: ``key`` is over budget
        """
        if not self.allow(key):
            raise RateLimitExceeded(key, self.max_requests, self.window_seconds)

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)
