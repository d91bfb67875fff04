"""Shared test fixtures: in-memory backend and usage index, no waiting."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from clientfinder.collector import ClientCollector
from clientfinder.metadata.fakes import FakeMetadataBackend
from clientfinder.metadata.workspace import WorkingContext
from clientfinder.resilience.rate_limiter import TokenBucket
from clientfinder.resilience.retry import RequestExecutor, RetryPolicy
from clientfinder.usage.fakes import FakeUsageIndex


class FakeClock:
    """Monotonic clock that only moves when ``sleep`` is awaited."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def _make_executor(
    clock: FakeClock,
    policy: RetryPolicy | None = None,
    *,
    rate: float = 1000.0,
    name: str = "test",
) -> RequestExecutor:
    """Executor with a fast fake-clocked bucket and zero cooldown."""
    return RequestExecutor(
        TokenBucket(rate, name=name, clock=clock, sleep=clock.sleep),
        policy or RetryPolicy(cooldown_seconds=0),
    )


@pytest.fixture
def make_executor(clock: FakeClock) -> Callable[..., RequestExecutor]:
    """Factory for executors sharing the test clock."""

    def _factory(
        policy: RetryPolicy | None = None, **kwargs: Any
    ) -> RequestExecutor:
        return _make_executor(clock, policy, **kwargs)

    return _factory


@pytest.fixture
def backend() -> FakeMetadataBackend:
    return FakeMetadataBackend()


@pytest.fixture
def index() -> FakeUsageIndex:
    return FakeUsageIndex()


@pytest.fixture
def context(tmp_path: Path) -> WorkingContext:
    root = tmp_path / "repo"
    root.mkdir()
    return WorkingContext(root=root)


@pytest.fixture
def collector(
    backend: FakeMetadataBackend,
    index: FakeUsageIndex,
    clock: FakeClock,
    tmp_path: Path,
) -> ClientCollector:
    return ClientCollector(
        backend,
        index,
        metadata_executor=_make_executor(clock, name="metadata"),
        usage_executor=_make_executor(clock, name="usage-index"),
        temp_base_dir=tmp_path,
    )
