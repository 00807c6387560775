import pytest

from application.ports.rate_limiter import RateLimiter
from infrastructure.ratelimit import SlidingWindowRateLimiter
from infrastructure.ratelimit.redis_limiter import RedisFixedWindowRateLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.mark.asyncio
async def test_sliding_window_blocks_then_recovers():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=10, clock=clock)
    assert isinstance(limiter, RateLimiter)

    first = await limiter.hit("1.2.3.4")
    second = await limiter.hit("1.2.3.4")
    third = await limiter.hit("1.2.3.4")
    assert (first.allowed, first.remaining) == (True, 1)
    assert (second.allowed, second.remaining) == (True, 0)
    assert not third.allowed
    assert third.retry_after == 11

    # other sources are counted separately
    assert (await limiter.hit("5.6.7.8")).allowed

    clock.now += 10.5
    assert (await limiter.hit("1.2.3.4")).allowed


@pytest.mark.asyncio
async def test_idle_keys_are_evicted():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=5, window_seconds=1, clock=clock)
    for i in range(100):
        await limiter.hit(f"10.0.0.{i}")
    clock.now += 2
    await limiter.hit("10.0.1.1")
    assert len(limiter._hits) == 1


@pytest.mark.asyncio
async def test_reset_clears_state():
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    await limiter.hit("k")
    assert not (await limiter.hit("k")).allowed
    await limiter.reset()
    assert (await limiter.hit("k")).allowed


def test_invalid_limits_rejected():
    with pytest.raises(ValueError):
        SlidingWindowRateLimiter(max_requests=0, window_seconds=10)


class FakePipeline:
    def __init__(self, store: dict) -> None:
        self.store = store
        self.ops: list = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def incr(self, key):
        self.ops.append(("incr", key))

    def ttl(self, key):
        self.ops.append(("ttl", key))

    async def execute(self):
        results = []
        for op, key in self.ops:
            if op == "incr":
                count, ttl = self.store.get(key, (0, -1))
                self.store[key] = (count + 1, ttl)
                results.append(count + 1)
            else:
                results.append(self.store.get(key, (0, -2))[1])
        self.ops.clear()
        return results


class FakeRedis:
    def __init__(self) -> None:
        self.store: dict = {}
        self.closed = False

    def pipeline(self, transaction=True):
        return FakePipeline(self.store)

    async def expire(self, key, seconds):
        count, _ = self.store[key]
        self.store[key] = (count, seconds)

    async def scan_iter(self, match=None):
        prefix = match.rstrip("*") if match else ""
        for key in list(self.store):
            if key.startswith(prefix):
                yield key

    async def delete(self, key):
        self.store.pop(key, None)

    async def aclose(self):
        self.closed = True


@pytest.mark.asyncio
async def test_redis_fixed_window_counts_per_key():
    client = FakeRedis()
    limiter = RedisFixedWindowRateLimiter(client, max_requests=2, window_seconds=60, namespace="totem")

    assert (await limiter.hit("1.2.3.4")).remaining == 1
    assert client.store["totem:ratelimit:1.2.3.4"] == (1, 60)
    assert (await limiter.hit("1.2.3.4")).allowed
    blocked = await limiter.hit("1.2.3.4")
    assert not blocked.allowed
    assert blocked.retry_after == 60
    assert (await limiter.hit("5.6.7.8")).allowed

    await limiter.reset()
    assert client.store == {}
    await limiter.aclose()
    assert client.closed
