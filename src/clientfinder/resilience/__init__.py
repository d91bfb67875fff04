"""Rate limiting, retry, and error classification for external calls."""

from clientfinder.resilience.errors import (
    BackendError,
    ClientFinderError,
    ErrorClass,
    ResolutionError,
    UsageFetchError,
    classify_error,
    is_retryable,
)
from clientfinder.resilience.rate_limiter import TokenBucket
from clientfinder.resilience.retry import RequestExecutor, RetryPolicy

__all__ = [
    "BackendError",
    "ClientFinderError",
    "ErrorClass",
    "RequestExecutor",
    "ResolutionError",
    "RetryPolicy",
    "TokenBucket",
    "UsageFetchError",
    "classify_error",
    "is_retryable",
]
