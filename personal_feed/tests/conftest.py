"""
Pytest fixtures for personal_feed tests.
"""

import os
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from personal_feed.config import state
from personal_feed.database import Database, ItemInput, SourceInput
from personal_feed.discovery import FeedDiscovery
from personal_feed.feeds import FeedParser
from personal_feed.fetcher import Fetcher
from personal_feed.local_settings import LocalSettings
from personal_feed.server import app
from personal_feed.sync import SyncClient
from personal_feed.tasks import RefreshCoordinator

STATE_FIELDS = (
    "db",
    "local_settings",
    "feed_parser",
    "discovery",
    "sync_client",
    "refresher",
    "scheduler",
    "fetcher",
    "provider",
    "summarizer",
)

SYNC_ENDPOINT = "http://sync.test/feed/items"


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        yield Path(f.name)
    # Cleanup
    if os.path.exists(f.name):
        os.unlink(f.name)


@pytest.fixture
def test_db(temp_db_path):
    """Create a test database instance."""
    db = Database(temp_db_path)
    yield db


@pytest.fixture
def temp_settings_path(tmp_path):
    """Path for a settings file that does not exist yet."""
    return tmp_path / "settings.json"


@pytest.fixture
def local_settings(temp_settings_path):
    return LocalSettings(temp_settings_path)


def _install_test_state(db: Database, settings: LocalSettings):
    """Point the shared app state at isolated instances. Returns the previous values."""
    original = {name: getattr(state, name) for name in STATE_FIELDS}

    feed_parser = FeedParser(timeout=1, retries=0, retry_wait=0)
    state.db = db
    state.local_settings = settings
    state.feed_parser = feed_parser
    state.discovery = FeedDiscovery(feed_parser.fetch_text, timeout=1)
    state.sync_client = SyncClient(db, SYNC_ENDPOINT, timeout=1)
    state.refresher = RefreshCoordinator(feed_parser, settings, db=db)
    state.scheduler = None  # No background loop in tests
    state.fetcher = Fetcher()
    state.provider = None
    state.summarizer = None  # Disable for tests (requires a local model)
    return original


def _restore_state(original: dict):
    for name, value in original.items():
        setattr(state, name, value)


@pytest.fixture
def client(temp_db_path, temp_settings_path):
    """Create a test client with isolated database and settings."""
    original = _install_test_state(Database(temp_db_path), LocalSettings(temp_settings_path))

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    _restore_state(original)


@pytest.fixture
def client_with_data(temp_db_path, temp_settings_path):
    """Test client with some sample data pre-populated."""
    test_db = Database(temp_db_path)
    original = _install_test_state(test_db, LocalSettings(temp_settings_path))

    # Add test data
    test_db.upsert_source(SourceInput(
        id="test-source",
        name="Test Source",
        url="https://example.com/feed.xml",
        category="Tech",
    ))
    test_db.upsert_item(ItemInput(
        source_id="test-source",
        title="Test Item 1",
        url="https://example.com/item1",
        published_at="2024-01-01T10:00:00.000Z",
        content_text="This is the text of test item 1.",
        score=0.2,
    ))
    test_db.upsert_item(ItemInput(
        source_id="test-source",
        title="Test Item 2",
        url="https://example.com/item2",
        published_at="2024-01-02T10:00:00.000Z",
        content_text="This is the text of test item 2.",
        score=0.9,
    ))

    # Mark one as read
    test_db.update_item_status("https://example.com/item1", "read")

    item1 = test_db.get_item_by_url("https://example.com/item1")
    item2 = test_db.get_item_by_url("https://example.com/item2")

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client, {
            "source_id": "test-source",
            "item_ids": [item1.id, item2.id],
            "item_urls": [item1.url, item2.url],
        }

    _restore_state(original)
