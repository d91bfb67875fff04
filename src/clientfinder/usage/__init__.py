"""Best-effort discovery of candidate clients from the web usage index."""

from clientfinder.usage.index import HttpUsageIndex, UsageIndex, usage_page_url
from clientfinder.usage.parser import UsagePage, parse_usage_page
from clientfinder.usage.scraper import UsageScraper

__all__ = [
    "HttpUsageIndex",
    "UsageIndex",
    "UsagePage",
    "UsageScraper",
    "parse_usage_page",
    "usage_page_url",
]
