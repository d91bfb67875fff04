"""Error hierarchy and classification for external-service failures.

Classifies exceptions by category to enable:
- Structured retry logging (which failures look like throttling)
- The ``classified`` retry mode (only retry transient/server/timeout)
- Telling unresolvable identities apart from temporary outages
"""

from __future__ import annotations

from enum import Enum


class ClientFinderError(Exception):
    """Base class for all clientfinder errors."""


class ResolutionError(ClientFinderError):
    """An identity does not resolve to any published version."""

    def __init__(self, coordinates: str, reason: str = "") -> None:
        self.coordinates = coordinates
        self.reason = reason
        msg = f"Couldn't resolve version range of {coordinates}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class BackendError(ClientFinderError):
    """The metadata backend failed to answer; usually temporary."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UsageFetchError(ClientFinderError):
    """The usage index returned a non-2xx response."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"HTTP {status_code} from {url}")
        self.url = url
        self.status_code = status_code


class ErrorClass(Enum):
    TRANSIENT = "transient"  # 429, network errors, retryable
    SERVER = "server"  # 500, 502, 503, retryable
    TIMEOUT = "timeout"  # deadline exceeded, retryable
    CLIENT = "client"  # 400, 401, 403, 404, do NOT retry
    PERMANENT = "permanent"  # identity does not exist
    UNKNOWN = "unknown"  # unclassified, do NOT retry


def classify_error(error: BaseException) -> ErrorClass:
    """Classify an error to determine handling strategy.

    Checks our own hierarchy first, then structured attributes
    (status_code), then exception types, and falls back to string
    matching for untyped exceptions.
    """
    if isinstance(error, ResolutionError):
        return ErrorClass.PERMANENT

    # 1. Structured status_code attribute (ours, httpx.HTTPStatusError)
    status_code = getattr(error, "status_code", None)
    if status_code is None:
        response = getattr(error, "response", None)
        status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        if status_code == 429:
            return ErrorClass.TRANSIENT
        if 400 <= status_code < 500:
            return ErrorClass.CLIENT
        if 500 <= status_code < 600:
            return ErrorClass.SERVER

    # 2. Timeout and connection types
    if isinstance(error, TimeoutError):
        return ErrorClass.TIMEOUT
    if isinstance(error, ConnectionError):
        return ErrorClass.TRANSIENT

    # 3. Fall back to string matching (httpx transport errors et al.)
    msg = f"{type(error).__name__} {error}".lower()

    if "timeout" in msg or "timed out" in msg:
        return ErrorClass.TIMEOUT
    if "429" in msg or "rate limit" in msg or "too many requests" in msg:
        return ErrorClass.TRANSIENT
    if any(code in msg for code in ("500", "502", "503", "504")):
        return ErrorClass.SERVER
    if "connect" in msg or "network" in msg or "protocol" in msg:
        return ErrorClass.TRANSIENT

    return ErrorClass.UNKNOWN


_RETRYABLE = frozenset({
    ErrorClass.TRANSIENT,
    ErrorClass.SERVER,
    ErrorClass.TIMEOUT,
})


def is_retryable(error: BaseException) -> bool:
    """Return True if the error category supports retry."""
    return classify_error(error) in _RETRYABLE


def treat_as_throttling(error: BaseException) -> bool:
    """Default predicate: every failure is throttling except a missing identity."""
    return not isinstance(error, ResolutionError)
