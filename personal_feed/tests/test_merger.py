"""
Tests for in-memory feed item merging.
"""

from datetime import datetime, timedelta, timezone

from personal_feed.merger import identity_key, merge_feed_items
from personal_feed.models import FeedItem

BASE = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _feed_item(link="", title="Title", days=0, source="Src", published=True, summary=""):
    return FeedItem(
        title=title,
        link=link,
        published=BASE + timedelta(days=days) if published else None,
        source=source,
        category="Crypto",
        summary=summary,
    )


class TestIdentityKey:
    def test_link_preferred(self):
        assert identity_key(_feed_item(link="https://a.test/1")) == "https://a.test/1"

    def test_source_and_title_without_link(self):
        assert identity_key(_feed_item(title="Hello", source="Blog")) == "Blog:Hello"


class TestMergeFeedItems:
    """Tests for merge_feed_items."""

    def test_later_published_wins(self):
        """Duplicates by link should keep the most recently published copy."""
        older = _feed_item(link="https://a.test/1", days=0, summary="old")
        newer = _feed_item(link="https://a.test/1", days=1, summary="new")
        merged = merge_feed_items([older, newer])
        assert len(merged) == 1
        assert merged[0].summary == "new"

    def test_tie_keeps_first_seen(self):
        first = _feed_item(link="https://a.test/1", summary="first")
        second = _feed_item(link="https://a.test/1", summary="second")
        assert merge_feed_items([first, second])[0].summary == "first"

    def test_sorted_newest_first_undated_last(self):
        items = [
            _feed_item(link="https://a.test/undated", published=False),
            _feed_item(link="https://a.test/old", days=-3),
            _feed_item(link="https://a.test/new", days=2),
        ]
        assert [i.link for i in merge_feed_items(items)] == [
            "https://a.test/new",
            "https://a.test/old",
            "https://a.test/undated",
        ]

    def test_naive_and_aware_dates_compare(self):
        naive = FeedItem(
            title="Naive", link="https://a.test/naive", published=datetime(2024, 7, 1),
            source="Src", category="Tech",
        )
        aware = _feed_item(link="https://a.test/aware", days=0)
        assert merge_feed_items([aware, naive])[0].link == "https://a.test/naive"

    def test_limit(self):
        items = [_feed_item(link=f"https://a.test/{n}", days=n) for n in range(10)]
        merged = merge_feed_items(items, limit=3)
        assert [i.link for i in merged] == ["https://a.test/9", "https://a.test/8", "https://a.test/7"]

    def test_linkless_items_dedupe_by_title(self):
        items = [_feed_item(title="Same", source="A"), _feed_item(title="Same", source="B")]
        assert len(merge_feed_items(items)) == 2

    def test_linkless_same_source_and_title_merge(self):
        """Two link-less copies of one post should merge, keeping the later date."""
        earlier = _feed_item(title="Weekly", source="Blog", days=0, summary="earlier")
        later = _feed_item(title="Weekly", source="Blog", days=1, summary="later")
        merged = merge_feed_items([later, earlier])
        assert len(merged) == 1
        assert merged[0].summary == "later"
