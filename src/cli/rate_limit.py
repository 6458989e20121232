"""Rate limiters for outbound collaborators and manual check triggers."""

import asyncio
import threading
import time


class TokenBucketRateLimiter:
    """Async-compatible token bucket rate limiter.

    Allows burst requests up to bucket size, then enforces
    steady-state rate.
    """

    def __init__(self, requests_per_second: float = 2.0, burst: int = 5):
        self.rate = requests_per_second
        self.max_tokens = burst
        self._tokens = float(burst)
        self._last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config) -> "TokenBucketRateLimiter":
        return cls(requests_per_second=config.requests_per_second, burst=config.burst)

    def _refill(self) -> None:
        """Refill tokens based on elapsed time."""
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self.max_tokens, self._tokens + elapsed * self.rate)
        self._last_refill = now

    async def acquire(self) -> None:
        """Acquire a token, waiting if necessary."""
        async with self._lock:
            self._refill()
            while self._tokens < 1.0:
                wait_time = (1.0 - self._tokens) / self.rate
                await asyncio.sleep(wait_time)
                self._refill()
            self._tokens -= 1.0

    @property
    def available_tokens(self) -> float:
        """Current available tokens (for monitoring)."""
        self._refill()
        return self._tokens


class KeyedCooldownLimiter:
    """Allow ``max_calls`` per ``period`` seconds for each key.

    Non-blocking: ``try_acquire`` answers immediately with the seconds to
    wait (0.0 when the call is admitted). Owned by whoever triggers manual
    checks; nothing here is process-global.
    """

    def __init__(self, period: float = 30.0, max_calls: int = 1):
        self.period = period
        self.max_calls = max_calls
        self._calls: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def _prune(self, key: str, now: float) -> list[float]:
        cutoff = now - self.period
        calls = [t for t in self._calls.get(key, []) if t > cutoff]
        if calls:
            self._calls[key] = calls
        else:
            self._calls.pop(key, None)
        return calls

    def try_acquire(self, key: str) -> float:
        """Record a call for ``key`` if allowed; otherwise return retry-after seconds."""
        now = time.monotonic()
        with self._lock:
            calls = self._prune(key, now)
            if len(calls) >= self.max_calls:
                return max(0.0, calls[0] + self.period - now)
            self._calls.setdefault(key, []).append(now)
            return 0.0

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._calls.clear()
            else:
                self._calls.pop(key, None)
