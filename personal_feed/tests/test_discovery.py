"""
Tests for feed discovery.
"""

import aiohttp
import pytest

from personal_feed.discovery import (
    DISCOVERY_FAILED_MESSAGE,
    FeedDiscovery,
    FeedDiscoveryError,
    build_discovery_candidates,
    extract_feed_links_from_html,
    inspect_feed_document,
    to_absolute_url,
)

RSS_DOC = """<?xml version="1.0"?>
<rss version="2.0"><channel><title>Example Blog</title>
<item><title>One</title></item><item><title>Two</title></item>
</channel></rss>"""

ATOM_DOC = """<?xml version="1.0"?>
<feed xmlns="http://www.w3.org/2005/Atom"><title>Atom Blog</title><entry><title>E</title></entry></feed>"""

HTML_WITH_HINT = """<html><head>
<link rel="alternate" type="application/rss+xml" href="/hidden/feed.xml">
<link rel="stylesheet" href="/style.css">
</head><body>Blog</body></html>"""


def fake_fetch(pages: dict[str, str], calls: list[str] | None = None):
    """Fetch stub serving known urls and failing everything else."""
    async def fetch(url: str) -> str:
        if calls is not None:
            calls.append(url)
        if url in pages:
            return pages[url]
        raise aiohttp.ClientConnectionError(f"no page at {url}")
    return fetch


class TestHelpers:
    """Tests for the discovery helpers."""

    def test_to_absolute_url_adds_scheme(self):
        assert to_absolute_url("  example.com  ") == "https://example.com"
        assert to_absolute_url("http://example.com/x") == "http://example.com/x"

    def test_to_absolute_url_empty(self):
        with pytest.raises(FeedDiscoveryError, match="required"):
            to_absolute_url("   ")

    def test_candidates_for_plain_page(self):
        candidates = build_discovery_candidates("https://example.com/blog")
        assert candidates[0] == "https://example.com/blog"
        assert "https://example.com/feed" in candidates
        assert "https://example.com/atom.xml" in candidates
        assert "https://example.com/blog/feed" in candidates
        assert "https://example.com/blog.xml" in candidates
        assert len(candidates) == len(set(candidates))

    def test_candidates_for_feed_looking_path(self):
        """A url that already looks like a feed is only tried itself."""
        assert build_discovery_candidates("https://example.com/rss.xml") == ["https://example.com/rss.xml"]

    def test_substack_feed_path(self):
        candidates = build_discovery_candidates("https://writer.substack.com/feed")
        assert candidates == ["https://writer.substack.com/feed"]

    def test_inspect_rss(self):
        info = inspect_feed_document(RSS_DOC)
        assert info.is_feed
        assert info.title == "Example Blog"
        assert info.item_count == 2

    def test_inspect_atom(self):
        info = inspect_feed_document(ATOM_DOC)
        assert info.is_feed
        assert info.title == "Atom Blog"
        assert info.item_count == 1

    def test_inspect_html_is_not_feed(self):
        assert not inspect_feed_document("<html><body>hi</body></html>").is_feed
        assert not inspect_feed_document("not xml at all <").is_feed

    def test_extract_feed_links(self):
        links = extract_feed_links_from_html(HTML_WITH_HINT, "https://example.com/blog")
        assert links == ["https://example.com/hidden/feed.xml"]


class TestFeedDiscovery:
    """Tests for the breadth-first search."""

    @pytest.mark.asyncio
    async def test_url_is_already_a_feed(self):
        discovery = FeedDiscovery(fake_fetch({"https://example.com/rss.xml": RSS_DOC}))
        found = await discovery.discover("example.com/rss.xml")
        assert found.feed_url == "https://example.com/rss.xml"
        assert found.feed_title == "Example Blog"

    @pytest.mark.asyncio
    async def test_conventional_path(self):
        pages = {
            "https://example.com/": "<html><body>home</body></html>",
            "https://example.com/feed": RSS_DOC,
        }
        found = await FeedDiscovery(fake_fetch(pages)).discover("https://example.com/")
        assert found.feed_url == "https://example.com/feed"

    @pytest.mark.asyncio
    async def test_follows_link_hint(self):
        """A feed linked from the page should be found after the conventional paths fail."""
        pages = {
            "https://example.com/blog": HTML_WITH_HINT,
            "https://example.com/hidden/feed.xml": ATOM_DOC,
        }
        found = await FeedDiscovery(fake_fetch(pages)).discover("https://example.com/blog")
        assert found.feed_url == "https://example.com/hidden/feed.xml"
        assert found.feed_title == "Atom Blog"

    @pytest.mark.asyncio
    async def test_each_candidate_tried_once(self):
        calls: list[str] = []
        pages = {"https://example.com/blog": HTML_WITH_HINT + HTML_WITH_HINT}
        with pytest.raises(FeedDiscoveryError):
            await FeedDiscovery(fake_fetch(pages, calls)).discover("https://example.com/blog")
        assert len(calls) == len(set(calls))
        assert "https://example.com/hidden/feed.xml" in calls

    @pytest.mark.asyncio
    async def test_nothing_found(self):
        with pytest.raises(FeedDiscoveryError) as exc_info:
            await FeedDiscovery(fake_fetch({})).discover("https://example.com")
        assert str(exc_info.value) == DISCOVERY_FAILED_MESSAGE
