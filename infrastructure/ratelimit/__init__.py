"""Rate limiter adapters; the instance is built once and kept on app.state."""
from __future__ import annotations

from typing import Optional

from application.ports.rate_limiter import RateLimiter
from core.config import settings
from core.settings import payment_settings
from .memory import SlidingWindowRateLimiter
from .redis_limiter import RedisFixedWindowRateLimiter, create_redis_rate_limiter


def build_rate_limiter() -> Optional[RateLimiter]:
    """Webhook limiter from configuration; None when limiting is disabled."""
    webhook = payment_settings.webhook
    if not webhook.rate_limit_enabled:
        return None
    if settings.redis.url:
        return create_redis_rate_limiter(
            settings.redis.url,
            webhook.rate_limit_requests,
            webhook.rate_limit_window_seconds,
            namespace=settings.redis.namespace,
            max_connections=settings.redis.max_connections,
        )
    return SlidingWindowRateLimiter(
        webhook.rate_limit_requests,
        webhook.rate_limit_window_seconds,
    )


__all__ = [
    "SlidingWindowRateLimiter",
    "RedisFixedWindowRateLimiter",
    "build_rate_limiter",
]
