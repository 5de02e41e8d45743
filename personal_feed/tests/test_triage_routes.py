"""
Tests for triage routes.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

from personal_feed.config import state
from personal_feed.feeds import FeedFetchResult
from personal_feed.models import FeedItem


class TestStoreTriage:
    """Tests for /triage/store endpoints."""

    def test_move_to_later(self, client_with_data):
        client, data = client_with_data
        response = client.put("/triage/store", json={"url": data["item_urls"][1], "bucket": "later"})
        assert response.status_code == 200
        assert response.json()["status"] == "saved"
        assert response.json()["bucket"] == "later"

        actions = client.get(f"/items/{data['item_ids'][1]}/actions").json()
        assert [a["action"] for a in actions] == ["save"]

    def test_list_bucket(self, client_with_data):
        client, data = client_with_data
        archive = client.get("/triage/store", params={"bucket": "archive"}).json()
        assert [i["url"] for i in archive] == [data["item_urls"][0]]
        inbox = client.get("/triage/store", params={"bucket": "inbox"}).json()
        assert [i["url"] for i in inbox] == [data["item_urls"][1]]

    def test_unknown_url(self, client_with_data):
        client, data = client_with_data
        response = client.put("/triage/store", json={"url": "https://nonexistent", "bucket": "archive"})
        assert response.status_code == 404

    def test_unknown_bucket(self, client_with_data):
        client, data = client_with_data
        response = client.put("/triage/store", json={"url": data["item_urls"][1], "bucket": "someday"})
        assert response.status_code == 422


class TestLocalTriage:
    """Tests for /triage/local endpoints."""

    def test_default_state(self, client):
        state_json = client.get("/triage/local", params={"link": "https://a.test/1"}).json()
        assert state_json["bucket"] == "inbox"
        assert state_json["read"] is False

    def test_archive_marks_read(self, client):
        response = client.put("/triage/local", json={"link": "https://a.test/1", "bucket": "archive"})
        assert response.status_code == 200
        assert response.json()["bucket"] == "archive"
        assert response.json()["read"] is True

    def test_archive_with_unread_flag_stays_read(self, client):
        response = client.put(
            "/triage/local", json={"link": "https://a.test/1", "bucket": "archive", "read": False}
        )
        assert response.json()["bucket"] == "archive"
        assert response.json()["read"] is True

    def test_mark_read_only(self, client):
        response = client.put("/triage/local", json={"link": "https://a.test/1", "read": True})
        assert response.json()["bucket"] == "inbox"
        assert response.json()["read"] is True

    def test_counts_over_last_refresh(self, client):
        items = [
            FeedItem(
                title=f"Post {n}",
                link=f"https://www.shoal.gg/p/{n}",
                published=datetime(2024, 5, 1, n, tzinfo=timezone.utc),
                source="Shoal",
                category="Crypto",
                source_id="shoal",
            )
            for n in range(3)
        ]
        results = [FeedFetchResult(source_id="shoal", items=items, checked_at="2024-05-01T00:00:00.000Z")]
        with patch.object(state.feed_parser, "fetch_all", AsyncMock(return_value=results)):
            client.post("/refresh")

        client.put("/triage/local", json={"link": "https://www.shoal.gg/p/0", "bucket": "later"})
        client.put("/triage/local", json={"link": "https://www.shoal.gg/p/1", "read": True})

        counts = client.get("/triage/local/counts").json()
        assert counts == {"inbox": 2, "later": 1, "archive": 0, "unread_inbox": 1}

    def test_counts_without_refresh(self, client):
        counts = client.get("/triage/local/counts").json()
        assert counts == {"inbox": 0, "later": 0, "archive": 0, "unread_inbox": 0}
