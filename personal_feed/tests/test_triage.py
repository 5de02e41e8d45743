"""
Tests for triage buckets.
"""

import json

import pytest

from personal_feed.database import ItemInput, ItemNotFoundError, SourceInput
from personal_feed.local_settings import SETTINGS_KEYS, LocalSettings
from personal_feed.triage import (
    InvalidBucketError,
    LocalTriage,
    StoreTriage,
    TriageState,
    apply_bucket,
    bucket_to_status,
    status_to_bucket,
)


class TestBucketMapping:
    @pytest.mark.parametrize("bucket,status", [
        ("inbox", "unread"),
        ("later", "saved"),
        ("archive", "read"),
    ])
    def test_round_trip(self, bucket, status):
        assert bucket_to_status(bucket) == status
        assert status_to_bucket(status) == bucket

    def test_statuses_without_bucket(self):
        assert status_to_bucket("clipped") is None
        assert status_to_bucket("dismissed") is None

    def test_unknown_bucket(self):
        with pytest.raises(InvalidBucketError):
            bucket_to_status("someday")


class TestApplyBucket:
    def test_archive_marks_read(self):
        state = apply_bucket(TriageState(), "archive")
        assert state.bucket == "archive"
        assert state.read is True

    def test_other_moves_keep_read_flag(self):
        """Moving back out of archive should not mark the link unread again."""
        archived = apply_bucket(TriageState(), "archive")
        assert apply_bucket(archived, "inbox").read is True
        assert apply_bucket(TriageState(), "later").read is False


class TestLocalTriage:
    """Tests for per-link triage in local settings."""

    def test_untriaged_link_defaults(self, local_settings):
        state = LocalTriage(local_settings).get("https://a.test/1")
        assert state.bucket == "inbox"
        assert state.read is False

    def test_set_bucket_persists(self, local_settings, temp_settings_path):
        LocalTriage(local_settings).set_bucket("https://a.test/1", "later")
        reloaded = LocalTriage(LocalSettings(temp_settings_path))
        assert reloaded.get("https://a.test/1").bucket == "later"

    def test_mark_read(self, local_settings):
        triage = LocalTriage(local_settings)
        triage.set_bucket("https://a.test/1", "later")
        state = triage.mark_read("https://a.test/1")
        assert state.read is True
        assert state.bucket == "later"

    def test_archived_link_stays_read(self, local_settings):
        """Marking an archived link unread should leave it read."""
        triage = LocalTriage(local_settings)
        triage.set_bucket("https://a.test/1", "archive")
        state = triage.mark_read("https://a.test/1", False)
        assert state.bucket == "archive"
        assert state.read is True
        assert triage.get("https://a.test/1").read is True

    def test_unread_after_leaving_archive(self, local_settings):
        triage = LocalTriage(local_settings)
        triage.set_bucket("https://a.test/1", "archive")
        triage.set_bucket("https://a.test/1", "inbox")
        assert triage.mark_read("https://a.test/1", False).read is False

    def test_stored_unread_archive_loads_as_read(self, temp_settings_path):
        temp_settings_path.write_text(json.dumps({
            SETTINGS_KEYS["triage_by_link"]: {
                "https://a.test/1": {"bucket": "archive", "read": False},
            },
        }), encoding="utf-8")
        state = LocalTriage(LocalSettings(temp_settings_path)).get("https://a.test/1")
        assert state.bucket == "archive"
        assert state.read is True

    def test_counts(self, local_settings):
        triage = LocalTriage(local_settings)
        triage.set_bucket("https://a.test/later", "later")
        triage.set_bucket("https://a.test/archived", "archive")
        triage.mark_read("https://a.test/read-inbox")

        counts = triage.counts([
            "https://a.test/later",
            "https://a.test/archived",
            "https://a.test/read-inbox",
            "https://a.test/fresh",
        ])
        assert (counts.inbox, counts.later, counts.archive) == (2, 1, 1)
        assert counts.unread_inbox == 1


class TestStoreTriage:
    """Tests for buckets mapped onto stored statuses."""

    @pytest.fixture
    def db_with_item(self, test_db):
        test_db.upsert_source(SourceInput(id="s", name="S", url="https://s.test", category="Tech"))
        test_db.upsert_item(ItemInput(source_id="s", title="T", url="https://s.test/1"))
        return test_db

    def test_later_saves_and_logs(self, db_with_item):
        StoreTriage(db_with_item).set_bucket("https://s.test/1", "later")
        item = db_with_item.get_item_by_url("https://s.test/1")
        assert item.status == "saved"
        actions = db_with_item.get_actions(item.id)
        assert [a.action for a in actions] == ["save"]
        assert actions[0].metadata == {"bucket": "later"}

    def test_inbox_logs_nothing(self, db_with_item):
        triage = StoreTriage(db_with_item)
        triage.set_bucket("https://s.test/1", "archive")
        triage.set_bucket("https://s.test/1", "inbox")
        item = db_with_item.get_item_by_url("https://s.test/1")
        assert item.status == "unread"
        assert [a.action for a in db_with_item.get_actions(item.id)] == ["read"]

    def test_unknown_url(self, db_with_item):
        with pytest.raises(ItemNotFoundError):
            StoreTriage(db_with_item).set_bucket("https://s.test/missing", "later")

    def test_unknown_bucket(self, db_with_item):
        with pytest.raises(InvalidBucketError):
            StoreTriage(db_with_item).set_bucket("https://s.test/1", "someday")
