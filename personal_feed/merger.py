"""
Merger - in-memory deduplication of freshly fetched feed items.

Used for the refresh view before anything touches the store; persisted
merges go through the store's upsert instead.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .models import FeedItem

MAX_ITEMS_PER_FEED = 30
MAX_TOTAL_ITEMS = 500

_UNDATED = datetime.min.replace(tzinfo=timezone.utc)


def identity_key(item: "FeedItem") -> str:
    """Link when present, else ``source:title``."""
    return item.link or f"{item.source}:{item.title}"


def _sort_time(item: "FeedItem") -> datetime:
    if item.published is None:
        return _UNDATED
    if item.published.tzinfo is None:
        return item.published.replace(tzinfo=timezone.utc)
    return item.published


def merge_feed_items(
    items: Iterable["FeedItem"],
    limit: int = MAX_TOTAL_ITEMS,
) -> list["FeedItem"]:
    """
    Deduplicate items by identity key, newest first.

    On a collision the item with the later published time wins; a tie
    keeps the one seen first. Undated items sort last.
    """
    deduped: dict[str, "FeedItem"] = {}
    for item in items:
        key = identity_key(item)
        existing = deduped.get(key)
        if existing is None or _sort_time(item) > _sort_time(existing):
            deduped[key] = item

    merged = sorted(deduped.values(), key=_sort_time, reverse=True)
    return merged[:limit]
