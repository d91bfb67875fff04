"""Environment-based configuration."""

from __future__ import annotations

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings

from clientfinder.constants import (
    DEFAULT_TARGET,
    DEFAULT_USER_AGENT,
    MAVEN_CENTRAL_URL,
    METADATA_RATE,
    RATE_BURST,
    REQUEST_TIMEOUT_SECONDS,
    RETRY_COOLDOWN_SECONDS,
    TEMP_DIR_PREFIX,
    USAGE_INDEX_URL,
    USAGE_RATE,
    RetryMode,
)
from clientfinder.coordinates import ComponentIdentity

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Reads from .env file and CLIENTFINDER_* environment variables."""

    # External services
    maven_repository_url: str = MAVEN_CENTRAL_URL
    usage_index_url: str = USAGE_INDEX_URL
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout_seconds: float = REQUEST_TIMEOUT_SECONDS

    # Pacing (permits / second)
    metadata_rate: float = METADATA_RATE
    usage_rate: float = USAGE_RATE
    rate_burst: float = RATE_BURST

    # Retry (None = retry forever)
    retry_mode: RetryMode = RetryMode.ALL
    retry_max_attempts: int | None = None
    retry_cooldown_seconds: float = RETRY_COOLDOWN_SECONDS

    # Collection
    max_concurrency: int = 1
    temp_dir_prefix: str = TEMP_DIR_PREFIX
    default_target: str = DEFAULT_TARGET

    # Logging
    log_level: str = "INFO"

    @field_validator("metadata_rate", "usage_rate")
    @classmethod
    def _positive_rate(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("rates must be positive")
        return v

    @field_validator("rate_burst")
    @classmethod
    def _valid_burst(cls, v: float) -> float:
        if v < 1:
            raise ValueError("rate_burst must be at least 1")
        return v

    @field_validator("retry_max_attempts")
    @classmethod
    def _valid_attempts(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("retry_max_attempts must be at least 1")
        return v

    @field_validator("max_concurrency")
    @classmethod
    def _valid_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrency must be at least 1")
        if v > 1:
            logger.warning(
                "max_concurrency=%d: verification runs concurrently, "
                "request rate is still bounded by the rate limiters",
                v,
            )
        return v

    @field_validator("default_target")
    @classmethod
    def _valid_target(cls, v: str) -> str:
        ComponentIdentity.parse(v)
        return v

    @property
    def default_identity(self) -> ComponentIdentity:
        return ComponentIdentity.parse(self.default_target)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "CLIENTFINDER_",
        "extra": "ignore",
    }
