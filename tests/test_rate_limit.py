"""Tests for token bucket and per-key cooldown limiters."""

import asyncio
import time

import pytest

from cli.config_models import RateLimitSourceConfig
from cli.rate_limit import KeyedCooldownLimiter, TokenBucketRateLimiter


class TestTokenBucketRateLimiter:
    """Test token bucket behavior."""

    @pytest.mark.asyncio
    async def test_initial_burst(self):
        """Burst tokens available immediately."""
        limiter = TokenBucketRateLimiter(requests_per_second=1.0, burst=3)
        start = time.monotonic()
        for _ in range(3):
            await limiter.acquire()
        assert time.monotonic() - start < 0.5
        assert limiter.available_tokens < 1.0

    @pytest.mark.asyncio
    async def test_rate_enforcement(self):
        """Rate is enforced after burst exhausted."""
        limiter = TokenBucketRateLimiter(requests_per_second=10.0, burst=1)
        await limiter.acquire()
        start = time.monotonic()
        await limiter.acquire()  # Should wait ~0.1s
        assert time.monotonic() - start >= 0.05

    @pytest.mark.asyncio
    async def test_concurrent_access(self):
        """Multiple coroutines can use limiter safely."""
        limiter = TokenBucketRateLimiter(requests_per_second=100.0, burst=10)
        results = []

        async def worker(i):
            await limiter.acquire()
            results.append(i)

        await asyncio.gather(*[worker(i) for i in range(10)])
        assert len(results) == 10

    def test_from_config(self):
        limiter = TokenBucketRateLimiter.from_config(
            RateLimitSourceConfig(requests_per_second=0.5, burst=2)
        )
        assert limiter.rate == 0.5
        assert limiter.max_tokens == 2


class TestKeyedCooldownLimiter:
    def test_first_call_admitted(self):
        limiter = KeyedCooldownLimiter(period=30)
        assert limiter.try_acquire("resolve") == 0.0

    def test_second_call_waits(self):
        limiter = KeyedCooldownLimiter(period=30)
        limiter.try_acquire("resolve")
        retry_after = limiter.try_acquire("resolve")
        assert 0 < retry_after <= 30

    def test_keys_independent(self):
        limiter = KeyedCooldownLimiter(period=30)
        limiter.try_acquire("resolve")
        assert limiter.try_acquire("blender") == 0.0

    def test_max_calls(self):
        limiter = KeyedCooldownLimiter(period=30, max_calls=2)
        assert limiter.try_acquire("k") == 0.0
        assert limiter.try_acquire("k") == 0.0
        assert limiter.try_acquire("k") > 0

    def test_period_expiry(self):
        limiter = KeyedCooldownLimiter(period=0.05)
        limiter.try_acquire("k")
        time.sleep(0.06)
        assert limiter.try_acquire("k") == 0.0

    def test_reset(self):
        limiter = KeyedCooldownLimiter(period=30)
        limiter.try_acquire("a")
        limiter.try_acquire("b")
        limiter.reset("a")
        assert limiter.try_acquire("a") == 0.0
        assert limiter.try_acquire("b") > 0
        limiter.reset()
        assert limiter.try_acquire("b") == 0.0
