"""Tests for the rate-limited retrying executor."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import pytest

from clientfinder.constants import RETRY_COOLDOWN_SECONDS, RetryMode
from clientfinder.resilience.errors import (
    ResolutionError,
    UsageFetchError,
    is_retryable,
    treat_as_throttling,
)
from clientfinder.resilience.retry import RequestExecutor, RetryPolicy


class _Flaky:
    """Fails ``failures`` times with ``exc``, then returns ``value``."""

    def __init__(self, failures: int, exc: Exception, value: str = "ok") -> None:
        self.failures = failures
        self.exc = exc
        self.value = value
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc
        return self.value


class TestRetryPolicy:
    def test_defaults_retry_forever_with_fixed_cooldown(self) -> None:
        policy = RetryPolicy()
        assert policy.max_attempts is None
        assert policy.cooldown_seconds == RETRY_COOLDOWN_SECONDS == 10.0
        assert policy.retryable is treat_as_throttling

    def test_classified_mode_uses_error_taxonomy(self) -> None:
        policy = RetryPolicy.for_mode("classified", max_attempts=3)
        assert policy.retryable is is_retryable
        assert policy.max_attempts == 3

    def test_all_mode(self) -> None:
        policy = RetryPolicy.for_mode(RetryMode.ALL, cooldown_seconds=1.5)
        assert policy.retryable is treat_as_throttling
        assert policy.cooldown_seconds == 1.5


class TestRequestExecutor:
    async def test_success_on_first_attempt(
        self, make_executor: Callable[..., RequestExecutor]
    ) -> None:
        op = _Flaky(0, ConnectionError())
        assert await make_executor().call(op) == "ok"
        assert op.calls == 1

    async def test_retries_until_success_without_limit(
        self, make_executor: Callable[..., RequestExecutor]
    ) -> None:
        """Default policy never gives up on throttling."""
        op = _Flaky(25, UsageFetchError("u", 403))
        assert await make_executor().call(op) == "ok"
        assert op.calls == 26

    async def test_each_attempt_takes_a_permit(
        self, make_executor: Callable[..., RequestExecutor], clock: Any
    ) -> None:
        executor = make_executor(rate=1.0)
        op = _Flaky(2, ConnectionError())
        await executor.call(op)
        # 3 attempts at 1 permit/s: the 2nd and 3rd wait a second each
        assert clock.sleeps == [1.0, 1.0]

    async def test_resolution_error_is_not_retried(
        self, make_executor: Callable[..., RequestExecutor]
    ) -> None:
        op = _Flaky(5, ResolutionError("g:a"))
        with pytest.raises(ResolutionError):
            await make_executor().call(op)
        assert op.calls == 1

    async def test_bounded_policy_reraises_last_error(
        self, make_executor: Callable[..., RequestExecutor]
    ) -> None:
        policy = RetryPolicy(max_attempts=3, cooldown_seconds=0)
        op = _Flaky(10, ConnectionError("still down"))
        with pytest.raises(ConnectionError, match="still down"):
            await make_executor(policy).call(op)
        assert op.calls == 3

    async def test_classified_policy_stops_on_client_error(
        self, make_executor: Callable[..., RequestExecutor]
    ) -> None:
        policy = RetryPolicy.for_mode("classified", cooldown_seconds=0)
        op = _Flaky(2, UsageFetchError("u", 404))
        with pytest.raises(UsageFetchError):
            await make_executor(policy).call(op)
        assert op.calls == 1

    async def test_failures_are_logged_before_retry(
        self,
        make_executor: Callable[..., RequestExecutor],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        op = _Flaky(2, ConnectionError("kicked"))
        with caplog.at_level(logging.ERROR, logger="clientfinder.resilience.retry"):
            await make_executor(name="metadata").call(op)
        failures = [r for r in caplog.records if "request_failed" in r.getMessage()]
        assert len(failures) == 2
        assert "service=metadata" in failures[0].getMessage()
        assert "class=transient" in failures[0].getMessage()
