"""Redis fixed-window rate limiter (INCR + EXPIRE)."""
from __future__ import annotations

from typing import Optional

from redis import asyncio as aioredis

from application.ports.rate_limiter import RateLimitDecision
from core.logging_config import get_logger


logger = get_logger(__name__)


class RedisFixedWindowRateLimiter:
    """Shared counter per key; the first hit of a window sets its expiry."""

    def __init__(
        self,
        client: aioredis.Redis,
        max_requests: int,
        window_seconds: int,
        namespace: str = "",
    ) -> None:
        self._client = client
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._namespace = f"{namespace.strip(':')}:ratelimit" if namespace else "ratelimit"

    def _format_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    async def hit(self, key: str) -> RateLimitDecision:
        formatted_key = self._format_key(key)
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.incr(formatted_key)
            pipe.ttl(formatted_key)
            count, ttl = await pipe.execute()
        if ttl is None or ttl < 0:
            await self._client.expire(formatted_key, self.window_seconds)
            ttl = self.window_seconds
        if count > self.max_requests:
            return RateLimitDecision(allowed=False, remaining=0, retry_after=max(1, int(ttl)))
        return RateLimitDecision(allowed=True, remaining=self.max_requests - count)

    async def reset(self) -> None:
        async for key in self._client.scan_iter(match=f"{self._namespace}:*"):
            await self._client.delete(key)

    async def aclose(self) -> None:
        await self._client.aclose()


def create_redis_rate_limiter(
    url: str,
    max_requests: int,
    window_seconds: int,
    namespace: Optional[str] = None,
    max_connections: int = 10,
) -> RedisFixedWindowRateLimiter:
    client = aioredis.from_url(
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
    )
    logger.info("redis_rate_limiter_created", window_seconds=window_seconds, max_requests=max_requests)
    return RedisFixedWindowRateLimiter(client, max_requests, window_seconds, namespace or "")
