"""Extract candidate identities from an mvnrepository.com usages page."""

from __future__ import annotations

from dataclasses import dataclass, field

from bs4 import BeautifulSoup

from clientfinder.constants import LINKS_PER_USAGE_ROW, USAGE_ROW_SELECTOR
from clientfinder.coordinates import ComponentIdentity


@dataclass(frozen=True)
class UsagePage:
    """Parsed content of one usages page.

    ``row_count`` counts every subtitle row, including the ones that
    were skipped; pagination stops only when it is zero.
    """

    number: int
    row_count: int
    candidates: list[ComponentIdentity] = field(
        default_factory=lambda: list[ComponentIdentity]()
    )

    @property
    def is_empty(self) -> bool:
        return self.row_count == 0


def parse_usage_page(html: str, number: int = 1) -> UsagePage:
    """Return one identity per well-formed usage row, in page order.

    Each user of the library is rendered as a block whose
    ``p.im-subtitle`` holds two links: group first, artifact second.
    Rows with any other link count are skipped.
    """
    soup = BeautifulSoup(html, "lxml")
    rows = soup.select(USAGE_ROW_SELECTOR)
    candidates: list[ComponentIdentity] = []
    for row in rows:
        links = row.select("a")
        if len(links) != LINKS_PER_USAGE_ROW:
            continue
        candidates.append(
            ComponentIdentity(
                group=links[0].get_text(strip=True),
                artifact=links[1].get_text(strip=True),
            )
        )
    return UsagePage(number=number, row_count=len(rows), candidates=candidates)
