"""
Vitalik's blog homepage parser.
"""

from datetime import datetime, timezone
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .base import SiteParser
from ..models import FeedItem
from ..timestamps import parse_timestamp

_DATE_FORMATS = ("%Y %b %d", "%Y %B %d", "%b %d, %Y", "%B %d, %Y", "%Y-%m-%d")


def _parse_post_date(text: str) -> datetime | None:
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return parse_timestamp(text)


class VitalikParser(SiteParser):
    """Posts are ``a.post-link`` entries with a ``.post-meta`` date in the same list item."""

    KEY = "vitalik"
    BASE_URL = "https://vitalik.eth.limo/"
    LIMIT = 40

    def extract(self, soup: BeautifulSoup, source: str, category: str) -> list[FeedItem]:
        items = []
        for link_el in soup.select("a.post-link"):
            href = link_el.get("href")
            if not href:
                continue

            published = None
            list_item = link_el.find_parent("li")
            meta = list_item.select_one(".post-meta") if list_item else None
            if meta:
                published = _parse_post_date(meta.get_text(strip=True))

            items.append(FeedItem(
                title=link_el.get_text(strip=True) or "Untitled",
                link=urljoin(self.BASE_URL, href),
                published=published,
                source=source,
                category=category,
            ))
        return items
