"""Tests for paginated candidate scraping."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from clientfinder.coordinates import ComponentIdentity, ComponentVersion
from clientfinder.resilience.errors import UsageFetchError
from clientfinder.resilience.retry import RequestExecutor, RetryPolicy
from clientfinder.usage.fakes import FakeUsageIndex
from clientfinder.usage.scraper import UsageScraper

TARGET = ComponentVersion("g", "lib", "1.0")


@pytest.fixture
def scraper(
    index: FakeUsageIndex, make_executor: Callable[..., RequestExecutor]
) -> UsageScraper:
    return UsageScraper(index, make_executor())


class TestIterCandidates:
    async def test_stops_at_first_empty_page(
        self, scraper: UsageScraper, index: FakeUsageIndex
    ) -> None:
        index.add_candidates("g:lib:1.0", ["x:a", "x:b"], ["x:c"])
        found = await scraper.collect_candidates(TARGET)
        assert found == [
            ComponentIdentity("x", "a"),
            ComponentIdentity("x", "b"),
            ComponentIdentity("x", "c"),
        ]
        assert index.requests == [
            ("g:lib:1.0", 1),
            ("g:lib:1.0", 2),
            ("g:lib:1.0", 3),
        ]

    async def test_empty_first_page_requests_nothing_else(
        self, scraper: UsageScraper, index: FakeUsageIndex
    ) -> None:
        assert await scraper.collect_candidates(TARGET) == []
        assert index.requests == [("g:lib:1.0", 1)]

    async def test_emits_one_candidate_per_two_link_row(
        self, scraper: UsageScraper, index: FakeUsageIndex
    ) -> None:
        rows: list[ComponentIdentity | list[str]] = [
            ComponentIdentity("x", str(i)) for i in range(7)
        ]
        rows.insert(3, ["noise"])
        index.add_page("g:lib:1.0", 1, rows)
        found = await scraper.collect_candidates(TARGET)
        assert len(found) == 7
        assert len(index.requests) == 2

    async def test_malformed_only_page_continues_pagination(
        self, scraper: UsageScraper, index: FakeUsageIndex
    ) -> None:
        index.add_page("g:lib:1.0", 1, [["noise"]])
        index.add_page("g:lib:1.0", 2, [ComponentIdentity("x", "a")])
        found = await scraper.collect_candidates(TARGET)
        assert found == [ComponentIdentity("x", "a")]
        assert len(index.requests) == 3

    async def test_repeats_across_pages_are_not_filtered(
        self, scraper: UsageScraper, index: FakeUsageIndex
    ) -> None:
        index.add_candidates("g:lib:1.0", ["x:a"], ["x:a"])
        found = await scraper.collect_candidates(TARGET)
        assert found == [ComponentIdentity("x", "a")] * 2

    async def test_custom_start_page(
        self, scraper: UsageScraper, index: FakeUsageIndex
    ) -> None:
        index.add_candidates("g:lib:1.0", ["x:a"], ["x:b"])
        found = await scraper.collect_candidates(TARGET, start_page=2)
        assert found == [ComponentIdentity("x", "b")]

    async def test_is_lazy(
        self, scraper: UsageScraper, index: FakeUsageIndex
    ) -> None:
        index.add_candidates("g:lib:1.0", ["x:a"], ["x:b"])
        stream = scraper.iter_candidates(TARGET)
        first = await anext(stream)
        assert first == ComponentIdentity("x", "a")
        assert index.requests == [("g:lib:1.0", 1)]
        await stream.aclose()


class _BlockingIndex(FakeUsageIndex):
    """Raises 403 for the first ``blocked`` requests."""

    def __init__(self, blocked: int) -> None:
        super().__init__()
        self.blocked = blocked

    async def fetch_usage_page(
        self, group: str, artifact: str, version: str, page: int
    ) -> str:
        if self.blocked > 0:
            self.blocked -= 1
            raise UsageFetchError("https://example.test", 403)
        return await super().fetch_usage_page(group, artifact, version, page)


async def test_throttled_page_is_retried(
    make_executor: Callable[..., RequestExecutor],
) -> None:
    index = _BlockingIndex(blocked=3)
    index.add_candidates("g:lib:1.0", ["x:a"])
    scraper = UsageScraper(index, make_executor())
    assert await scraper.collect_candidates(TARGET) == [ComponentIdentity("x", "a")]


async def test_unrecoverable_scrape_propagates(
    make_executor: Callable[..., RequestExecutor],
) -> None:
    index = _BlockingIndex(blocked=10)
    scraper = UsageScraper(
        index, make_executor(RetryPolicy(max_attempts=2, cooldown_seconds=0))
    )
    with pytest.raises(UsageFetchError):
        await scraper.collect_candidates(TARGET)
