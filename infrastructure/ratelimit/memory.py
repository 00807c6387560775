"""
In-memory sliding-window rate limiter.

State is per process; use the Redis limiter when several workers share
the same webhook traffic.
"""
from __future__ import annotations

import asyncio
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict

from application.ports.rate_limiter import RateLimitDecision


class SlidingWindowRateLimiter:
    """Allows ``max_requests`` hits per key within any ``window_seconds`` span."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests <= 0 or window_seconds <= 0:
            raise ValueError("max_requests and window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()

    def _evict(self, now: float) -> None:
        """Drop expired timestamps; keys with nothing left are forgotten."""
        cutoff = now - self.window_seconds
        for key in list(self._hits):
            hits = self._hits[key]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self._hits[key]

    async def hit(self, key: str) -> RateLimitDecision:
        async with self._lock:
            now = self._clock()
            self._evict(now)
            hits = self._hits[key]
            if len(hits) >= self.max_requests:
                retry_after = int(hits[0] + self.window_seconds - now) + 1
                return RateLimitDecision(allowed=False, remaining=0, retry_after=max(1, retry_after))
            hits.append(now)
            return RateLimitDecision(allowed=True, remaining=self.max_requests - len(hits))

    async def reset(self) -> None:
        async with self._lock:
            self._hits.clear()

    async def aclose(self) -> None:
        return None
