"""Walk the paginated usages of a component, yielding candidate clients.

The index has no "last page" marker: pages are requested one after
another until one comes back without any subtitle rows.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from clientfinder.constants import FIRST_USAGE_PAGE
from clientfinder.coordinates import ComponentIdentity, ComponentVersion
from clientfinder.resilience.retry import RequestExecutor
from clientfinder.usage.index import UsageIndex
from clientfinder.usage.parser import UsagePage, parse_usage_page

logger = logging.getLogger(__name__)


class UsageScraper:
    def __init__(self, index: UsageIndex, executor: RequestExecutor) -> None:
        self._index = index
        self._executor = executor

    async def fetch_page(
        self, target: ComponentVersion, page: int
    ) -> UsagePage:
        """Fetch and parse one page, riding out throttling."""
        html = await self._executor.call(
            lambda: self._index.fetch_usage_page(
                target.group, target.artifact, target.version, page
            ),
            description=f"usages of {target} p={page}",
        )
        return parse_usage_page(html, number=page)

    async def iter_candidates(
        self,
        target: ComponentVersion,
        start_page: int = FIRST_USAGE_PAGE,
    ) -> AsyncIterator[ComponentIdentity]:
        """Yield candidates page by page; stops at the first empty page.

        Candidates are version-less and may repeat across pages.
        """
        page = start_page
        while True:
            usage_page = await self.fetch_page(target, page)
            if usage_page.is_empty:
                logger.debug(
                    "No usage rows for %s on page %d, stopping", target, page
                )
                return
            for candidate in usage_page.candidates:
                yield candidate
            page += 1

    async def collect_candidates(
        self,
        target: ComponentVersion,
        start_page: int = FIRST_USAGE_PAGE,
    ) -> list[ComponentIdentity]:
        return [c async for c in self.iter_candidates(target, start_page)]
