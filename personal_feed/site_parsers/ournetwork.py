"""
OurNetwork issue listing parser.
"""

import re
from datetime import datetime, timezone
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .base import SiteParser
from ..models import FeedItem

_ISSUE_PATH = re.compile(r"/p/(on-\d+-[\w-]+)")
_ISSUE_SLUG = re.compile(r"on-(\d+)-(.+)")
_US_DATE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")


def _parse_us_date(text: str) -> datetime | None:
    """Parse ``M/D/YYYY`` into a UTC midnight datetime."""
    match = _US_DATE.search(text)
    if not match:
        return None
    month, day, year = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return None


class OurNetworkParser(SiteParser):
    """Issue cards link to ``/p/on-<number>-<slug>``."""

    KEY = "ournetwork"
    BASE_URL = "https://www.ournetwork.xyz"
    LIMIT = 20

    def extract(self, soup: BeautifulSoup, source: str, category: str) -> list[FeedItem]:
        items = []
        for card in soup.select('a[href*="/p/on-"]'):
            href = card.get("href")
            if not href:
                continue
            path_match = _ISSUE_PATH.search(href)
            if not path_match:
                continue
            slug_match = _ISSUE_SLUG.match(path_match.group(1))
            if not slug_match:
                continue

            issue_number, title_slug = slug_match.groups()
            words = title_slug.replace("-", " ")
            title = f"ON-{issue_number}: {words[:1].upper()}{words[1:]}"

            time_el = card.find("time")
            date_text = time_el.get_text(strip=True) if time_el else card.get_text(" ", strip=True)

            items.append(FeedItem(
                title=title,
                link=urljoin(self.BASE_URL, href),
                published=_parse_us_date(date_text),
                source=source,
                category=category,
            ))
        return items
