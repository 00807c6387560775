"""
Rate limiter port used by the webhook ingress.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after: int = 0


@runtime_checkable
class RateLimiter(Protocol):
    """Counts hits per key inside a time window."""

    async def hit(self, key: str) -> RateLimitDecision: ...

    async def reset(self) -> None: ...

    async def aclose(self) -> None: ...
