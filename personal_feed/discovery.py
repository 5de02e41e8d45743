"""
Feed Discovery - find the RSS/Atom feed behind a user-supplied URL.

Probes the URL itself and conventional feed paths, follows
``<link rel="alternate">`` hints from any HTML page it lands on, and
stops at the first response that is actually a feed document.
"""

import asyncio
import logging
import re
import xml.etree.ElementTree as ET
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

FEED_DISCOVERY_PATHS = [
    "/feed",
    "/feed.xml",
    "/rss",
    "/rss.xml",
    "/atom.xml",
    "/index.xml",
    "/blog/feed",
    "/newsletter/feed",
]

FEED_MIME_TYPES = ("application/rss+xml", "application/atom+xml")
DISCOVERY_FAILED_MESSAGE = "Could not discover an RSS/Atom feed from that URL."

_FEED_PATH = re.compile(r"(feed|rss|atom|xml)", re.IGNORECASE)


class FeedDiscoveryError(Exception):
    """No candidate URL produced a feed document."""


@dataclass
class FeedDocumentInfo:
    is_feed: bool
    title: str | None = None
    item_count: int = 0


@dataclass
class DiscoveredFeed:
    feed_url: str
    feed_title: str | None


def to_absolute_url(value: str) -> str:
    """Add ``https://`` to bare hosts. Raises FeedDiscoveryError on empty input."""
    trimmed = value.strip()
    if not trimmed:
        raise FeedDiscoveryError("Feed URL is required.")
    if not re.match(r"^https?://", trimmed, re.IGNORECASE):
        trimmed = f"https://{trimmed}"
    if not urlparse(trimmed).hostname:
        raise FeedDiscoveryError(f"Invalid feed URL: {value}")
    return trimmed


def build_discovery_candidates(url: str) -> list[str]:
    """The URL itself, then conventional feed locations, de-duplicated in order."""
    initial = urlparse(url)
    origin = f"{initial.scheme}://{initial.netloc}"
    candidates: list[str] = []

    def enqueue(value: str):
        candidate = urljoin(origin, value)
        if candidate not in candidates:
            candidates.append(candidate)

    enqueue(url)
    path = initial.path.rstrip("/")

    if not _FEED_PATH.search(path):
        for feed_path in FEED_DISCOVERY_PATHS:
            enqueue(feed_path)
        if path:
            enqueue(f"{path}/feed")
            enqueue(f"{path}/rss")
            enqueue(f"{path}.xml")

    if "substack.com" in (initial.hostname or ""):
        enqueue("/feed")

    return candidates


def _local_name(tag) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def inspect_feed_document(text: str) -> FeedDocumentInfo:
    """Decide whether a response body is an RSS/Atom/RDF feed."""
    try:
        root = ET.fromstring(text.strip().encode("utf-8"))
    except ET.ParseError:
        return FeedDocumentInfo(is_feed=False)

    root_name = _local_name(root.tag)
    elements = list(root.iter())
    has_channel = any(_local_name(el.tag) == "channel" for el in elements)
    if root_name not in ("rss", "feed", "RDF") and not has_channel:
        return FeedDocumentInfo(is_feed=False)

    title = None
    container = root if root_name == "feed" else next(
        (el for el in elements if _local_name(el.tag) == "channel"), None
    )
    if container is not None:
        for child in container:
            if _local_name(child.tag) == "title" and child.text and child.text.strip():
                title = child.text.strip()
                break

    item_count = sum(1 for el in elements if _local_name(el.tag) in ("item", "entry"))
    return FeedDocumentInfo(is_feed=True, title=title, item_count=item_count)


def extract_feed_links_from_html(html: str, base_url: str) -> list[str]:
    """Absolute URLs of RSS/Atom ``<link>`` hints in a page."""
    soup = BeautifulSoup(html, "html.parser")
    discovered: list[str] = []

    for link in soup.find_all("link"):
        href = link.get("href")
        if not href:
            continue
        link_type = (link.get("type") or "").lower()
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        is_alternate = "alternate" in [r.lower() for r in rel]
        if (is_alternate and ("rss" in link_type or "atom" in link_type)) or link_type in FEED_MIME_TYPES:
            url = urljoin(base_url, href)
            if url not in discovered:
                discovered.append(url)

    return discovered


class FeedDiscovery:
    """Breadth-first search over candidate URLs for a feed document."""

    def __init__(self, fetch_text: Callable[[str], Awaitable[str]], timeout: float = 12):
        self.fetch_text = fetch_text
        self.timeout = timeout

    async def discover(self, url: str) -> DiscoveredFeed:
        """
        Find a feed for ``url``.

        Raises:
            FeedDiscoveryError: when every candidate has been tried without
                finding a feed.
        """
        start_url = to_absolute_url(url)
        queue = deque(build_discovery_candidates(start_url))
        seen: set[str] = set()

        while queue:
            candidate = queue.popleft()
            if candidate in seen:
                continue
            seen.add(candidate)

            try:
                content = await asyncio.wait_for(self.fetch_text(candidate), timeout=self.timeout)
            except Exception as e:
                logger.debug(f"Discovery attempt failed for {candidate}: {e}")
                continue

            info = inspect_feed_document(content)
            if info.is_feed:
                logger.info(f"Discovered feed {candidate} for {url}")
                return DiscoveredFeed(feed_url=candidate, feed_title=info.title)

            for link in extract_feed_links_from_html(content, candidate):
                if link not in seen:
                    queue.append(link)

        raise FeedDiscoveryError(DISCOVERY_FAILED_MESSAGE)
