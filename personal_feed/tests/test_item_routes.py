"""
Tests for item routes.
"""


class TestListItems:
    """Tests for GET /items endpoint."""

    def test_list_items_empty(self, client):
        """Should return empty list when no items."""
        response = client.get("/items")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_items_newest_first(self, client_with_data):
        """Should return items ordered by published date, newest first."""
        client, data = client_with_data
        response = client.get("/items")
        assert response.status_code == 200
        assert [i["url"] for i in response.json()] == list(reversed(data["item_urls"]))

    def test_list_items_has_required_fields(self, client_with_data):
        """Each item should carry its source and bucket."""
        client, data = client_with_data
        item = client.get("/items").json()[0]
        assert item["source_id"] == "test-source"
        assert item["source_name"] == "Test Source"
        assert item["source_category"] == "Tech"
        assert item["status"] == "unread"
        assert item["bucket"] == "inbox"

    def test_filter_by_status(self, client_with_data):
        """Should filter by one or more statuses."""
        client, data = client_with_data
        read = client.get("/items", params={"status": "read"}).json()
        assert [i["url"] for i in read] == [data["item_urls"][0]]

        both = client.get("/items", params=[("status", "read"), ("status", "unread")]).json()
        assert len(both) == 2

    def test_filter_by_category_and_score(self, client_with_data):
        client, data = client_with_data
        assert len(client.get("/items", params={"category": "Tech"}).json()) == 2
        assert client.get("/items", params={"category": "Crypto"}).json() == []
        high = client.get("/items", params={"min_score": 0.5}).json()
        assert [i["url"] for i in high] == [data["item_urls"][1]]

    def test_order_by_score_ascending(self, client_with_data):
        client, data = client_with_data
        items = client.get("/items", params={"order_by": "score", "order_dir": "ASC"}).json()
        assert [i["score"] for i in items] == [0.2, 0.9]

    def test_invalid_order_column(self, client):
        """Should reject unknown order columns."""
        response = client.get("/items", params={"order_by": "title"})
        assert response.status_code == 422

    def test_limit_bounds(self, client):
        assert client.get("/items", params={"limit": 0}).status_code == 422


class TestGetItem:
    """Tests for single item lookups."""

    def test_get_by_id(self, client_with_data):
        client, data = client_with_data
        response = client.get(f"/items/{data['item_ids'][0]}")
        assert response.status_code == 200
        assert response.json()["title"] == "Test Item 1"

    def test_get_missing(self, client):
        """Should return 404 for unknown ids."""
        response = client.get("/items/99999")
        assert response.status_code == 404

    def test_lookup_by_url(self, client_with_data):
        client, data = client_with_data
        response = client.get("/items/lookup", params={"url": data["item_urls"][1]})
        assert response.status_code == 200
        assert response.json()["id"] == data["item_ids"][1]

    def test_lookup_missing(self, client):
        response = client.get("/items/lookup", params={"url": "https://nonexistent"})
        assert response.status_code == 404


class TestUpdateStatus:
    """Tests for PUT /items/status endpoint."""

    def test_update_status(self, client_with_data):
        """Should set the status and stamp acted_at."""
        client, data = client_with_data
        response = client.put("/items/status", json={"url": data["item_urls"][1], "status": "saved"})
        assert response.status_code == 200
        item = response.json()
        assert item["status"] == "saved"
        assert item["bucket"] == "later"
        assert item["acted_at"] is not None

    def test_update_status_not_found(self, client_with_data):
        """Should return 404 and leave the store unchanged."""
        client, data = client_with_data
        response = client.put("/items/status", json={"url": "https://nonexistent", "status": "read"})
        assert response.status_code == 404
        statuses = sorted(i["status"] for i in client.get("/items").json())
        assert statuses == ["read", "unread"]

    def test_update_status_invalid(self, client_with_data):
        client, data = client_with_data
        response = client.put("/items/status", json={"url": data["item_urls"][1], "status": "starred"})
        assert response.status_code == 422


class TestItemActions:
    """Tests for the action log endpoints."""

    def test_log_and_list(self, client_with_data):
        client, data = client_with_data
        item_id = data["item_ids"][1]
        response = client.post(f"/items/{item_id}/actions", json={"action": "clip", "metadata": {"why": "idea"}})
        assert response.status_code == 200
        assert response.json()["success"] is True

        actions = client.get(f"/items/{item_id}/actions").json()
        assert len(actions) == 1
        assert actions[0]["action"] == "clip"
        assert actions[0]["metadata"] == {"why": "idea"}

    def test_log_for_missing_item(self, client):
        response = client.post("/items/99999/actions", json={"action": "clip"})
        assert response.status_code == 404

    def test_unknown_action(self, client_with_data):
        client, data = client_with_data
        response = client.post(f"/items/{data['item_ids'][0]}/actions", json={"action": "like"})
        assert response.status_code == 422
