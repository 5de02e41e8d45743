"""
Tests for the local device settings file.
"""

import json

import pytest

from personal_feed.local_settings import SETTINGS_KEYS, LocalSettings
from personal_feed.sources import CustomFeed
from personal_feed.triage import TriageState


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")


class TestDefaults:
    def test_missing_file(self, local_settings):
        assert local_settings.get_enabled_by_id() == {}
        assert local_settings.get_custom_feeds() == []
        assert local_settings.get_global_enabled() is True
        assert local_settings.get_triage_by_link() == {}
        assert local_settings.get_saved_views() == []
        assert local_settings.get_reading_mode() == "headline"


class TestCorruption:
    """A malformed file or value should fall back to defaults, never raise."""

    def test_unparseable_file(self, temp_settings_path):
        temp_settings_path.write_text("{not json", encoding="utf-8")
        settings = LocalSettings(temp_settings_path)
        assert settings.get_global_enabled() is True
        assert settings.get_custom_feeds() == []

    def test_top_level_not_object(self, temp_settings_path):
        _write(temp_settings_path, ["a", "b"])
        assert LocalSettings(temp_settings_path).get_enabled_by_id() == {}

    def test_wrong_value_types(self, temp_settings_path):
        _write(temp_settings_path, {
            SETTINGS_KEYS["enabled_by_id"]: ["shoal"],
            SETTINGS_KEYS["global_enabled"]: "yes",
            SETTINGS_KEYS["reading_mode"]: "comic",
            SETTINGS_KEYS["saved_views"]: {"id": "x"},
        })
        settings = LocalSettings(temp_settings_path)
        assert settings.get_enabled_by_id() == {}
        assert settings.get_global_enabled() is True
        assert settings.get_reading_mode() == "headline"
        assert settings.get_saved_views() == []

    def test_bad_entries_dropped(self, temp_settings_path):
        _write(temp_settings_path, {
            SETTINGS_KEYS["enabled_by_id"]: {"shoal": False, "aave": "no"},
            SETTINGS_KEYS["custom_feeds"]: [
                {"id": "custom-a", "url": "https://a.test/feed", "source": "A", "category": "Sports"},
                {"id": "custom-b", "url": "", "source": "B"},
                "junk",
            ],
            SETTINGS_KEYS["triage_by_link"]: {
                "https://a.test/1": {"bucket": "someday", "read": 1},
                "https://a.test/2": "junk",
            },
        })
        settings = LocalSettings(temp_settings_path)
        assert settings.get_enabled_by_id() == {"shoal": False}

        feeds = settings.get_custom_feeds()
        assert [f.id for f in feeds] == ["custom-a"]
        assert feeds[0].category == "Crypto"

        triage = settings.get_triage_by_link()
        assert list(triage) == ["https://a.test/1"]
        assert triage["https://a.test/1"].bucket == "inbox"
        assert triage["https://a.test/1"].read is True


class TestWrites:
    def test_round_trip(self, local_settings, temp_settings_path):
        local_settings.set_enabled_by_id({"shoal": False})
        local_settings.set_global_enabled(False)
        local_settings.set_reading_mode("expanded")
        local_settings.set_custom_feeds([
            CustomFeed(id="custom-a", url="https://a.test/feed", source="A", category="Tech",
                       created_at="2024-01-01T00:00:00.000Z"),
        ])
        local_settings.set_triage_by_link({
            "https://a.test/1": TriageState(bucket="later", read=False, updated_at="2024-01-01T00:00:00.000Z"),
        })

        reloaded = LocalSettings(temp_settings_path)
        assert reloaded.get_enabled_by_id() == {"shoal": False}
        assert reloaded.get_global_enabled() is False
        assert reloaded.get_reading_mode() == "expanded"
        assert reloaded.get_custom_feeds()[0].category == "Tech"
        assert reloaded.get_triage_by_link()["https://a.test/1"].bucket == "later"

    def test_keys_are_versioned(self, local_settings, temp_settings_path):
        local_settings.set_global_enabled(False)
        data = json.loads(temp_settings_path.read_text(encoding="utf-8"))
        assert data == {"personal-feed:globalEnabled:v1": False}

    def test_writes_keep_other_keys(self, local_settings):
        local_settings.set_reading_mode("expanded")
        local_settings.set_global_enabled(False)
        assert local_settings.get_reading_mode() == "expanded"

    def test_invalid_reading_mode(self, local_settings):
        with pytest.raises(ValueError):
            local_settings.set_reading_mode("comic")

    def test_save_view_once(self, local_settings):
        first = local_settings.save_view("Crypto", "Shoal")
        local_settings.save_view("Crypto", "Shoal")
        assert first.id == "Crypto:Shoal"
        assert [v.id for v in local_settings.get_saved_views()] == ["Crypto:Shoal"]
