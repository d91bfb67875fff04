"""Token-bucket pacing for outbound requests.

One bucket per external service. Admission is serialised with an
asyncio.Lock, so concurrent callers are let through one at a time in
roughly the order they arrived.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable


class TokenBucket:
    """Bound the sustained rate of ``acquire()`` calls.

    ``rate`` permits are added per second up to ``burst``; each
    acquisition consumes one. Over any window of T seconds at most
    ``rate * T + burst`` acquisitions succeed.
    """

    def __init__(
        self,
        rate: float,
        burst: float = 1.0,
        *,
        name: str = "",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        if burst < 1:
            raise ValueError("burst must allow at least one permit")
        self.rate = rate
        self.burst = burst
        self.name = name
        self._clock = clock
        self._sleep = sleep
        self._tokens = burst
        self._updated = clock()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated)
        self._tokens = min(self.burst, self._tokens + elapsed * self.rate)
        self._updated = now

    async def acquire(self) -> float:
        """Wait for a permit. Returns the seconds spent waiting."""
        async with self._lock:
            self._refill()
            waited = 0.0
            if self._tokens < 1:
                waited = (1 - self._tokens) / self.rate
                await self._sleep(waited)
                self._refill()
                # The clock may lag the requested sleep by rounding.
                self._tokens = max(self._tokens, 1.0)
            self._tokens -= 1
            return waited

    def __repr__(self) -> str:
        return f"TokenBucket(name={self.name!r}, rate={self.rate}, burst={self.burst})"
