"""In-memory usage index for testing.

Renders canned candidate lists as minimal usages-page HTML, so the real
parser runs against every page the scraper requests.
"""

from __future__ import annotations

from html import escape

from clientfinder.coordinates import ComponentIdentity


def render_usage_page(rows: list[ComponentIdentity | list[str]]) -> str:
    """Build HTML with one ``p.im-subtitle`` per row.

    A row given as a list of strings becomes that many links, which
    lets tests produce malformed rows.
    """
    blocks: list[str] = []
    for row in rows:
        texts = [row.group, row.artifact] if isinstance(row, ComponentIdentity) else row
        links = "".join(f'<a href="#">{escape(t)}</a> » ' for t in texts)
        blocks.append(f'<div class="im"><p class="im-subtitle">{links}</p></div>')
    return f"<html><body>{''.join(blocks)}</body></html>"


class FakeUsageIndex:
    """Dict-backed UsageIndex keyed by ``(g:a:v, page)``.

    Pages that were not registered come back empty.
    """

    def __init__(self) -> None:
        self._pages: dict[tuple[str, int], str] = {}
        self.requests: list[tuple[str, int]] = []

    def add_page(
        self,
        target: str,
        page: int,
        rows: list[ComponentIdentity | list[str]],
    ) -> None:
        self._pages[(target, page)] = render_usage_page(rows)

    def add_candidates(self, target: str, *pages: list[str]) -> None:
        """Register consecutive pages of ``g:a`` candidates from page 1."""
        for number, coords in enumerate(pages, start=1):
            self.add_page(
                target, number, [ComponentIdentity.parse(c) for c in coords]
            )

    async def fetch_usage_page(
        self, group: str, artifact: str, version: str, page: int
    ) -> str:
        key = (f"{group}:{artifact}:{version}", page)
        self.requests.append(key)
        return self._pages.get(key, render_usage_page([]))
