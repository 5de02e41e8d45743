"""
Feed Parser - Fetch and parse RSS/Atom feeds and HTML listing pages.

Handles:
- RSS 2.0 and Atom 1.0 formats via feedparser
- HTML sources through the site parser registry
- Per-attempt timeout with a bounded retry
- Concurrent fan-out where one failing source never sinks the others
"""

import asyncio
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone

import aiohttp
import feedparser
from bs4 import BeautifulSoup
from tenacity import AsyncRetrying, stop_after_attempt, wait_fixed

from .merger import MAX_ITEMS_PER_FEED
from .models import FeedItem
from .site_parsers import get_parser
from .sources import FeedSource
from .timestamps import utc_now_iso

logger = logging.getLogger(__name__)

SUMMARY_LENGTH = 200


class FeedTimeoutError(Exception):
    """A single fetch attempt ran past its deadline."""


@dataclass
class FeedFetchIssue:
    """Why a source produced no items this cycle."""
    source_id: str
    source: str
    category: str
    url: str
    message: str


@dataclass
class FeedFetchResult:
    """Outcome of fetching one source."""
    source_id: str
    items: list[FeedItem] = field(default_factory=list)
    issue: FeedFetchIssue | None = None
    latency_ms: int = 0
    checked_at: str = ""


def strip_html(html: str) -> str:
    """Visible text of an HTML fragment with whitespace collapsed."""
    if not html:
        return ""
    text = BeautifulSoup(html, "html.parser").get_text(" ", strip=True)
    return re.sub(r"\s+", " ", text).strip()


def _entry_datetime(entry) -> datetime | None:
    for attr in ("published_parsed", "updated_parsed"):
        parsed = entry.get(attr)
        if parsed:
            try:
                return datetime(*parsed[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                continue
    return None


def _entry_link(entry) -> str:
    link = entry.get("link", "")
    if not link:
        for candidate in entry.get("links", []):
            if candidate.get("rel") == "alternate" or candidate.get("type") == "text/html":
                link = candidate.get("href", "")
                break
    return link.strip()


class FeedParser:
    """Fetches sources with a timeout and retry, and parses them into feed items."""

    def __init__(
        self,
        timeout: float = 12,
        retries: int = 1,
        retry_wait: float = 0.3,
        user_agent: str | None = None,
    ):
        self.timeout = timeout
        self.retries = retries
        self.retry_wait = retry_wait
        self.user_agent = user_agent or "PersonalFeed/0.1 (+https://github.com/personal-feed)"

    async def fetch_text(self, url: str) -> str:
        """GET a url and return the body as text."""
        headers = {"User-Agent": self.user_agent}

        async with aiohttp.ClientSession() as session:
            async with session.get(
                url,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                resp.raise_for_status()
                return await resp.text()

    def parse(
        self,
        content: str,
        source: str,
        category: str,
        link_filter: str | None = None,
    ) -> list[FeedItem]:
        """Parse RSS/Atom content using feedparser."""
        parsed = feedparser.parse(content)

        if parsed.bozo and not parsed.entries:
            raise ValueError(f"Failed to parse feed: {parsed.bozo_exception}")

        items = []
        for entry in parsed.entries:
            link = _entry_link(entry)
            if link_filter and not re.search(link_filter, link):
                continue

            description = entry.get("summary") or ""
            if not description and entry.get("content"):
                description = entry.content[0].get("value", "")

            items.append(FeedItem(
                title=(entry.get("title") or "").strip() or "Untitled",
                link=link,
                published=_entry_datetime(entry),
                source=source,
                category=category,
                summary=strip_html(description)[:SUMMARY_LENGTH],
                author=entry.get("author"),
            ))
        return items

    async def _fetch_items(self, feed: FeedSource) -> list[FeedItem]:
        """One attempt: fetch under the deadline, then parse by source type."""
        try:
            content = await asyncio.wait_for(self.fetch_text(feed.url), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise FeedTimeoutError(f"{feed.source} timed out after {round(self.timeout)}s")

        if feed.type == "html":
            parser = get_parser(feed.parser_key)
            if not parser:
                raise ValueError("No parser configured for HTML source")
            items = parser.parse(content, feed.source, feed.category)
        else:
            items = self.parse(content, feed.source, feed.category, feed.link_filter)

        for item in items:
            item.source_id = feed.id
        return items[:MAX_ITEMS_PER_FEED]

    async def fetch_source(self, feed: FeedSource) -> FeedFetchResult:
        """
        Fetch one source, retrying once with a short backoff.

        Never raises: a source that keeps failing comes back with an issue
        and no items.
        """
        started = time.monotonic()
        checked_at = utc_now_iso()

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retries + 1),
                wait=wait_fixed(self.retry_wait),
                reraise=True,
            ):
                with attempt:
                    items = await self._fetch_items(feed)
        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.warning(f"Failed to fetch {feed.source} ({feed.url}): {message}")
            return FeedFetchResult(
                source_id=feed.id,
                issue=FeedFetchIssue(
                    source_id=feed.id,
                    source=feed.source,
                    category=feed.category,
                    url=feed.url,
                    message=message,
                ),
                latency_ms=int((time.monotonic() - started) * 1000),
                checked_at=checked_at,
            )

        return FeedFetchResult(
            source_id=feed.id,
            items=items,
            latency_ms=int((time.monotonic() - started) * 1000),
            checked_at=checked_at,
        )

    async def fetch_all(self, feeds: list[FeedSource]) -> list[FeedFetchResult]:
        """Fetch sources concurrently. Results keep the order of ``feeds``."""
        return list(await asyncio.gather(*(self.fetch_source(feed) for feed in feeds)))
