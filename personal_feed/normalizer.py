"""
Normalizer - turn untrusted remote records into store-ready candidates.

Handles:
- Field aliasing (camelCase and legacy names) through one ordered table
- Required-field validation (title, absolute url)
- Enum coercion with defaults (category, source type, status)
- Deterministic source ids (slugs)
- Timestamp canonicalization
- Payload envelope unwrapping
"""

import math
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Mapping
from urllib.parse import urlparse

from .database.models import CATEGORIES, ITEM_STATUSES, SOURCE_TYPES, ItemInput, SourceInput
from .timestamps import normalize_timestamp

if TYPE_CHECKING:
    from .models import FeedItem
    from .sources import FeedSource

# Canonical field -> accepted input keys, first present key wins
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "title": ("title",),
    "url": ("url", "link"),
    "source_name": ("source_name", "sourceName", "source"),
    "source_url": ("source_url", "sourceUrl"),
    "source_id": ("source_id", "sourceId"),
    "source_type": ("source_type", "sourceType", "type"),
    "category": ("category",),
    "author": ("author",),
    "published_at": ("published_at", "publishedAt", "pubDate"),
    "content_md": ("content_md", "contentMd"),
    "content_text": ("content_text", "contentText"),
    "summary": ("summary",),
    "score": ("score",),
    "status": ("status",),
    "acted_at": ("acted_at", "actedAt"),
    "updated_at": ("updated_at", "updatedAt"),
    "fetched_at": ("fetched_at", "fetchedAt"),
}

SLUG_MAX_LENGTH = 80
UNKNOWN_SOURCE_SLUG = "unknown-source"
DEFAULT_CATEGORY = "General"
DEFAULT_SOURCE_TYPE = "rss"
DEFAULT_STATUS = "unread"


@dataclass
class SyncCandidate:
    """A validated item plus the source it belongs to and its sync cursor."""
    item: ItemInput
    source: SourceInput
    cursor: str | None


def resolve_aliases(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Map a raw record onto canonical field names."""
    resolved = {}
    for canonical, keys in FIELD_ALIASES.items():
        for key in keys:
            if key in raw and raw[key] is not None:
                resolved[canonical] = raw[key]
                break
    return resolved


def slugify(value: str) -> str:
    """Lowercase, collapse non-alphanumerics to ``-``, trim, cap at 80 chars."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    slug = slug[:SLUG_MAX_LENGTH].strip("-")
    return slug or UNKNOWN_SOURCE_SLUG


def _text(value: Any) -> str | None:
    """Return a stripped non-empty string, or None."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return None


def _hostname(url: str | None) -> str | None:
    if not url:
        return None
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


def is_absolute_url(url: str) -> bool:
    """True when the url has both a scheme and a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def _score(value: Any) -> float:
    """A finite number, or 0. Numeric strings are parsed; booleans are not numbers."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0.0
    if not isinstance(value, (int, float)):
        return 0.0
    return float(value) if math.isfinite(value) else 0.0


def resolve_source_id(
    source_id: str | None,
    source_name: str | None,
    source_url: str | None,
    item_url: str | None = None,
) -> str | None:
    """Explicit id, else slug of the name, else slug of a hostname."""
    if source_id:
        return source_id
    if source_name:
        return slugify(source_name)
    for url in (source_url, item_url):
        host = _hostname(url)
        if host:
            return slugify(host)
    return None


def normalize_sync_candidate(raw: Any) -> SyncCandidate | None:
    """
    Validate and normalize one raw record.

    Returns None for anything that cannot become a stored item: non-mapping
    input, a missing title, a missing or relative url, or no way to derive
    a source id.
    """
    if not isinstance(raw, Mapping):
        return None

    fields = resolve_aliases(raw)

    title = _text(fields.get("title"))
    url = _text(fields.get("url"))
    if not title or not url or not is_absolute_url(url):
        return None

    source_name = _text(fields.get("source_name"))
    source_url = _text(fields.get("source_url"))
    if source_url and not is_absolute_url(source_url):
        source_url = None
    source_id = resolve_source_id(
        _text(fields.get("source_id")), source_name, source_url, url
    )
    if not source_id:
        return None

    category = fields.get("category")
    if category not in CATEGORIES:
        category = DEFAULT_CATEGORY

    source_type = fields.get("source_type")
    if source_type not in SOURCE_TYPES:
        source_type = DEFAULT_SOURCE_TYPE

    status = fields.get("status")
    if status not in ITEM_STATUSES:
        status = DEFAULT_STATUS

    published_at = normalize_timestamp(fields.get("published_at"))
    updated_at = normalize_timestamp(fields.get("updated_at"))
    fetched_at = normalize_timestamp(fields.get("fetched_at"))

    item = ItemInput(
        source_id=source_id,
        title=title,
        url=url,
        author=_text(fields.get("author")),
        published_at=published_at,
        content_md=_text(fields.get("content_md")),
        content_text=_text(fields.get("content_text")),
        summary=_text(fields.get("summary")),
        score=_score(fields.get("score")),
        status=status,
        acted_at=normalize_timestamp(fields.get("acted_at")),
    )
    source = SourceInput(
        id=source_id,
        name=source_name or source_id,
        url=source_url or url,
        type=source_type,
        category=category,
        enabled=True,
    )
    return SyncCandidate(
        item=item,
        source=source,
        cursor=updated_at or fetched_at or published_at,
    )


# ─────────────────────────────────────────────────────────────
# Payload envelopes
# ─────────────────────────────────────────────────────────────

def _bare_list(payload: Any) -> list | None:
    return payload if isinstance(payload, list) else None


def _items_key(payload: Any) -> list | None:
    if isinstance(payload, Mapping) and isinstance(payload.get("items"), list):
        return payload["items"]
    return None


def _data_list(payload: Any) -> list | None:
    if isinstance(payload, Mapping) and isinstance(payload.get("data"), list):
        return payload["data"]
    return None


def _data_items(payload: Any) -> list | None:
    if isinstance(payload, Mapping):
        return _items_key(payload.get("data"))
    return None


# Tried in order; the first rule that recognizes the payload wins
ENVELOPE_RULES: tuple[Callable[[Any], list | None], ...] = (
    _bare_list,
    _items_key,
    _data_list,
    _data_items,
)


def extract_payload_items(payload: Any) -> list:
    """Unwrap the record list from any accepted envelope shape, else []."""
    for rule in ENVELOPE_RULES:
        records = rule(payload)
        if records is not None:
            return records
    return []


def feed_item_to_candidate(item: "FeedItem", source: "FeedSource") -> SyncCandidate | None:
    """Run a fetched feed item through the same validation as synced records."""
    return normalize_sync_candidate({
        "title": item.title,
        "url": item.link,
        "source_id": source.id,
        "source_name": source.source,
        "source_url": source.url,
        "source_type": source.type,
        "category": source.category,
        "author": item.author,
        "published_at": item.published,
        "summary": item.summary,
    })
