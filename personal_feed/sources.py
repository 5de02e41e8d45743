"""
Source registry - built-in feeds, custom feeds and their runtime view.
"""

import logging
import re
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from .database.models import SourceInput

if TYPE_CHECKING:
    from .database import Database

logger = logging.getLogger(__name__)


@dataclass
class FeedSource:
    """A source as the fetchers see it."""
    id: str
    url: str
    source: str  # Display name
    type: str
    category: str
    parser_key: str | None = None
    link_filter: str | None = None  # Regex a link must match to be kept
    enabled: bool = True
    built_in: bool = True

    def to_source_input(self) -> SourceInput:
        return SourceInput(
            id=self.id,
            name=self.source,
            url=self.url,
            type=self.type,
            category=self.category,
            enabled=self.enabled,
        )


@dataclass
class CustomFeed:
    """A user-added RSS feed, persisted in local settings."""
    id: str
    url: str
    source: str
    category: str
    enabled: bool = True
    created_at: str | None = None


def _rss(id: str, url: str, source: str, category: str) -> FeedSource:
    return FeedSource(id=id, url=url, source=source, type="rss", category=category)


DEFAULT_SOURCES: list[FeedSource] = [
    _rss("decentralised", "https://www.decentralised.co/feed", "Decentralised.co", "Crypto"),
    FeedSource(
        id="ournetwork",
        url="https://www.ournetwork.xyz/",
        source="OurNetwork",
        type="html",
        category="Crypto",
        parser_key="ournetwork",
    ),
    _rss("shoal", "https://www.shoal.gg/feed", "Shoal", "Crypto"),
    _rss("artemis", "https://research.artemisanalytics.com/feed", "Artemis", "Crypto"),
    _rss("ethereum-foundation", "https://blog.ethereum.org/feed.xml", "Ethereum Foundation", "Crypto"),
    _rss("celestia", "https://blog.celestia.org/rss/", "Celestia", "Crypto"),
    _rss("arbitrum-foundation", "https://blog.arbitrum.foundation/rss/", "Arbitrum Foundation", "Crypto"),
    _rss("arbitrum-tech", "https://blog.arbitrum.io/rss/", "Arbitrum Tech", "Crypto"),
    _rss("starkware", "https://medium.com/feed/starkware", "StarkWare", "Crypto"),
    _rss("aave", "https://medium.com/feed/aave", "Aave", "Crypto"),
    _rss("compound", "https://medium.com/feed/compound-finance", "Compound", "Crypto"),
    _rss("1inch", "https://medium.com/feed/1inch-network", "1inch", "Crypto"),
    _rss("chainlink", "https://blog.chain.link/rss/", "Chainlink", "Crypto"),
    _rss("flashbots", "https://medium.com/feed/flashbots", "Flashbots", "Crypto"),
    _rss("blockworks", "https://blockworks.co/feed", "Blockworks", "Crypto"),
    _rss("coindesk", "https://www.coindesk.com/arc/outboundfeeds/rss/", "CoinDesk", "Crypto"),
    _rss("unchained", "https://unchainedcrypto.com/feed/", "Unchained", "Crypto"),
    _rss("vitalik", "https://vitalik.eth.limo/feed.xml", "Vitalik", "Crypto"),
    _rss("castle-labs", "https://castlelabs.substack.com/feed", "Castle Labs", "Crypto"),
    _rss("april-dunford", "https://aprildunford.substack.com/feed", "April Dunford", "Marketing"),
    _rss("mkt1", "https://newsletter.mkt1.co/feed", "MKT1", "Marketing"),
]


def build_runtime_sources(
    enabled_by_id: dict[str, bool],
    custom_feeds: list[CustomFeed],
) -> list[FeedSource]:
    """Built-ins (enabled unless toggled off) followed by custom RSS feeds."""
    built_ins = [
        FeedSource(
            id=feed.id,
            url=feed.url,
            source=feed.source,
            type=feed.type,
            category=feed.category,
            parser_key=feed.parser_key,
            link_filter=feed.link_filter,
            enabled=enabled_by_id.get(feed.id, True),
            built_in=True,
        )
        for feed in DEFAULT_SOURCES
    ]
    custom = [
        FeedSource(
            id=feed.id,
            url=feed.url,
            source=feed.source,
            type="rss",
            category=feed.category,
            enabled=enabled_by_id.get(feed.id, feed.enabled),
            built_in=False,
        )
        for feed in custom_feeds
    ]
    return built_ins + custom


def seed_default_sources(db: "Database") -> int:
    """Insert built-in sources the store does not have yet. Returns how many were added."""
    existing = {source.id for source in db.get_sources()}
    inserted = 0
    for feed in DEFAULT_SOURCES:
        if feed.id in existing:
            continue
        db.upsert_source(feed.to_source_input())
        inserted += 1

    if inserted:
        logger.info(f"Inserted {inserted} default source(s)")
    return inserted


def create_custom_feed_id(source_name: str, url: str) -> str:
    """``custom-`` plus a slug of the name and url."""
    normalized = f"{source_name.strip().lower()}-{url.strip().lower()}"
    safe = re.sub(r"[^a-z0-9]+", "-", normalized).strip("-")
    return f"custom-{safe or _base36(int(time.time() * 1000))}"


def source_name_from_url(url: str) -> str:
    """Title-cased first label of the host, e.g. ``https://www.foo-bar.com`` -> ``Foo Bar``."""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        host = ""
    host = re.sub(r"^www\.", "", host, flags=re.IGNORECASE)
    if not host:
        return "Custom Source"
    base = host.split(".")[0] or host
    words = re.sub(r"[-_]+", " ", base).split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def _base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while value:
        value, rem = divmod(value, 36)
        out = digits[rem] + out
    return out or "0"


def unique_source_id(base_id: str, taken: set[str]) -> str:
    """Append a short time-based suffix when the id is already used."""
    if base_id not in taken:
        return base_id
    return f"{base_id}-{_base36(int(time.time() * 1000))[-4:]}"
