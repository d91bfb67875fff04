"""Tests for the token bucket."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from clientfinder.resilience.rate_limiter import TokenBucket


def _bucket(clock: Any, rate: float = 2.0, burst: float = 1.0) -> TokenBucket:
    return TokenBucket(rate, burst, clock=clock, sleep=clock.sleep)


class TestConstruction:
    def test_rejects_non_positive_rate(self) -> None:
        with pytest.raises(ValueError, match="rate"):
            TokenBucket(0)

    def test_rejects_burst_below_one(self) -> None:
        with pytest.raises(ValueError, match="burst"):
            TokenBucket(1.0, burst=0.5)


class TestAcquire:
    async def test_first_acquire_is_immediate(self, clock: Any) -> None:
        bucket = _bucket(clock)
        assert await bucket.acquire() == 0.0
        assert clock.sleeps == []

    async def test_second_acquire_waits_one_interval(self, clock: Any) -> None:
        bucket = _bucket(clock, rate=2.0)
        await bucket.acquire()
        waited = await bucket.acquire()
        assert waited == pytest.approx(0.5)
        assert clock.now == pytest.approx(0.5)

    async def test_idle_time_refills_up_to_burst(self, clock: Any) -> None:
        bucket = _bucket(clock, rate=1.0, burst=3.0)
        for _ in range(3):
            await bucket.acquire()
        clock.now += 100.0
        waits = [await bucket.acquire() for _ in range(4)]
        assert waits[:3] == [0.0, 0.0, 0.0]
        assert waits[3] == pytest.approx(1.0)

    @pytest.mark.parametrize("rate", [2.5, 4.0])
    async def test_rate_bound_over_window(self, clock: Any, rate: float) -> None:
        """Acquisitions within T seconds never exceed rate*T + burst."""
        bucket = _bucket(clock, rate=rate)
        stamps: list[float] = []
        for _ in range(50):
            await bucket.acquire()
            stamps.append(clock.now)
        for window in (1.0, 2.0, 5.0):
            for start in stamps:
                inside = [s for s in stamps if start <= s < start + window - 1e-9]
                assert len(inside) <= rate * window + bucket.burst

    async def test_concurrent_acquisitions_are_paced(self, clock: Any) -> None:
        bucket = _bucket(clock, rate=4.0)
        waits = await asyncio.gather(*(bucket.acquire() for _ in range(5)))
        assert sorted(waits) == pytest.approx([0.0, 0.25, 0.25, 0.25, 0.25])
        assert clock.now == pytest.approx(1.0)
