"""
Base class for per-site HTML listing parsers.
"""

from abc import ABC, abstractmethod

from bs4 import BeautifulSoup

from ..merger import merge_feed_items
from ..models import FeedItem


class SiteParser(ABC):
    """Turns a site's listing page into feed items."""

    # Key referenced by a source's parser_key
    KEY: str = ""
    # Base used to resolve relative links
    BASE_URL: str = ""
    # Maximum items returned, newest first
    LIMIT: int = 20

    def parse(self, html: str, source: str, category: str) -> list[FeedItem]:
        soup = BeautifulSoup(html, "html.parser")
        items = self.extract(soup, source, category)
        return merge_feed_items(items, limit=self.LIMIT)

    @abstractmethod
    def extract(self, soup: BeautifulSoup, source: str, category: str) -> list[FeedItem]:
        """Pull items out of the parsed page, in document order."""
        pass
