"""Rate-limited request execution with retry on failure.

Both external services block clients that hammer them, so every
outbound call goes through a :class:`RequestExecutor`: take a permit
from the service's bucket, run the call, and on failure wait a fixed
cooldown and try again. By default this never gives up; a bounded
:class:`RetryPolicy` can be configured instead.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    stop_never,
    wait_fixed,
)

from clientfinder.constants import (
    ERROR_TRUNCATION_CHARS,
    RETRY_COOLDOWN_SECONDS,
    RetryMode,
)
from clientfinder.resilience.errors import (
    classify_error,
    is_retryable,
    treat_as_throttling,
)
from clientfinder.resilience.rate_limiter import TokenBucket

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """How often, how long, and on what to retry.

    ``max_attempts=None`` retries forever.
    """

    max_attempts: int | None = None
    cooldown_seconds: float = RETRY_COOLDOWN_SECONDS
    retryable: Callable[[BaseException], bool] = field(
        default=treat_as_throttling
    )

    @classmethod
    def for_mode(
        cls,
        mode: RetryMode | str,
        *,
        max_attempts: int | None = None,
        cooldown_seconds: float = RETRY_COOLDOWN_SECONDS,
    ) -> RetryPolicy:
        predicate = (
            is_retryable
            if RetryMode(mode) == RetryMode.CLASSIFIED
            else treat_as_throttling
        )
        return cls(
            max_attempts=max_attempts,
            cooldown_seconds=cooldown_seconds,
            retryable=predicate,
        )


class RequestExecutor:
    """Runs zero-argument coroutine functions under a bucket and a policy."""

    def __init__(
        self,
        limiter: TokenBucket,
        policy: RetryPolicy | None = None,
        *,
        service: str = "",
    ) -> None:
        self.limiter = limiter
        self.policy = policy or RetryPolicy()
        self.service = service or limiter.name

    def _retrying(self) -> AsyncRetrying:
        policy = self.policy
        return AsyncRetrying(
            stop=(
                stop_never
                if policy.max_attempts is None
                else stop_after_attempt(policy.max_attempts)
            ),
            wait=wait_fixed(policy.cooldown_seconds),
            retry=retry_if_exception(policy.retryable),
            before_sleep=self._log_retry,
            reraise=True,
        )

    def _log_retry(self, state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        logger.error(
            "event=request_failed service=%s attempt=%d class=%s "
            "cooldown=%.1fs error=%s",
            self.service,
            state.attempt_number,
            classify_error(exc).value if exc else "unknown",
            self.policy.cooldown_seconds,
            str(exc)[:ERROR_TRUNCATION_CHARS],
        )

    async def call(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        description: str = "",
    ) -> T:
        """Run ``operation`` until it succeeds or the policy gives up.

        Non-retryable errors and the last error of an exhausted policy
        are re-raised unchanged.
        """
        async for attempt in self._retrying():
            with attempt:
                await self.limiter.acquire()
                if description:
                    logger.debug(
                        "event=request service=%s attempt=%d what=%s",
                        self.service,
                        attempt.retry_state.attempt_number,
                        description,
                    )
                return await operation()
        raise RuntimeError("unreachable: retry loop exited without result")
