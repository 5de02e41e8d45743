"""
Database models - dataclasses for database entities and write inputs.
"""

from dataclasses import dataclass

CATEGORIES = ("Crypto", "Marketing", "Tech", "General")
SOURCE_TYPES = ("rss", "html", "email")
ITEM_STATUSES = ("unread", "read", "clipped", "dismissed", "saved")
USER_ACTIONS = ("clip", "dismiss", "content_idea", "save", "read")
ORDER_COLUMNS = ("published_at", "fetched_at", "score")


@dataclass
class DBSource:
    id: str
    name: str
    url: str
    type: str
    category: str
    enabled: bool
    added_at: str


@dataclass
class DBItem:
    id: int
    source_id: str
    title: str
    url: str
    author: str | None
    published_at: str | None
    fetched_at: str
    content_md: str | None
    content_text: str | None
    summary: str | None
    score: float
    status: str
    acted_at: str | None
    source_name: str | None = None  # Joined from sources
    source_category: str | None = None


@dataclass
class DBUserAction:
    id: int
    item_id: int
    action: str
    created_at: str
    metadata: dict | None = None


@dataclass
class SourceInput:
    """Source values for an upsert. ``added_at`` None means "now" on insert."""
    id: str
    name: str
    url: str
    type: str = "rss"
    category: str = "General"
    enabled: bool = True
    added_at: str | None = None


@dataclass
class ItemInput:
    """Item values for an upsert."""
    source_id: str
    title: str
    url: str
    author: str | None = None
    published_at: str | None = None
    content_md: str | None = None
    content_text: str | None = None
    summary: str | None = None
    score: float = 0.0
    status: str = "unread"
    acted_at: str | None = None


@dataclass
class ItemFilters:
    """Query filters for listing items."""
    status: str | list[str] | None = None
    source_id: str | None = None
    category: str | None = None
    min_score: float | None = None
    order_by: str = "published_at"
    order_dir: str = "DESC"
    limit: int = 200
    offset: int = 0
