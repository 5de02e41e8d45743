"""
Transient item shapes shared by the fetchers, the merger and the normalizer.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class FeedItem:
    """A single entry pulled from an RSS/Atom feed or a scraped HTML page."""
    title: str
    link: str
    published: datetime | None
    source: str  # Source display name
    category: str
    summary: str = ""
    author: str | None = None
    source_id: str | None = None
