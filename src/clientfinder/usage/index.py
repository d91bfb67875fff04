"""HTTP access to the mvnrepository.com usage index."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from clientfinder.constants import (
    DEFAULT_USER_AGENT,
    REQUEST_TIMEOUT_SECONDS,
    USAGE_INDEX_URL,
    USAGE_PAGE_PATH,
)
from clientfinder.resilience.errors import UsageFetchError

logger = logging.getLogger(__name__)


class UsageIndex(Protocol):
    async def fetch_usage_page(
        self, group: str, artifact: str, version: str, page: int
    ) -> str: ...


def usage_page_url(
    base_url: str, group: str, artifact: str, version: str, page: int
) -> str:
    path = USAGE_PAGE_PATH.format(
        group=group, artifact=artifact, version=version
    )
    return f"{base_url.rstrip('/')}{path}?p={page}"


class HttpUsageIndex:
    """Fetches raw usages pages; a non-2xx answer raises UsageFetchError."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = USAGE_INDEX_URL,
        *,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._client = client
        self._base_url = base_url
        self._timeout = timeout
        self._headers = {"User-Agent": user_agent}

    async def fetch_usage_page(
        self, group: str, artifact: str, version: str, page: int
    ) -> str:
        url = usage_page_url(self._base_url, group, artifact, version, page)
        response = await self._client.get(
            url,
            headers=self._headers,
            timeout=self._timeout,
            follow_redirects=True,
        )
        if not response.is_success:
            raise UsageFetchError(url, response.status_code)
        logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return response.text
