"""
Local device settings - a small JSON key/value file.

Holds the reader's per-device preferences under fixed, versioned keys.
Every value is validated on read; anything malformed is logged and
replaced by its default, so a corrupt file never stops the app.
"""

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from .database.models import CATEGORIES
from .sources import CustomFeed
from .timestamps import utc_now_iso
from .triage import BUCKETS, TriageState

logger = logging.getLogger(__name__)

SETTINGS_KEYS = {
    "enabled_by_id": "personal-feed:enabledById:v1",
    "custom_feeds": "personal-feed:customFeeds:v1",
    "global_enabled": "personal-feed:globalEnabled:v1",
    "triage_by_link": "personal-feed:triageByLink:v1",
    "saved_views": "personal-feed:savedViews:v1",
    "reading_mode": "personal-feed:readingMode:v1",
}

READING_MODES = ("headline", "expanded")
DEFAULT_CUSTOM_CATEGORY = "Crypto"


@dataclass
class SavedView:
    """A pinned category/source filter; id is ``<category>:<source>``."""
    id: str
    category: str
    source: str


def _category(value: Any) -> str:
    return value if value in CATEGORIES else DEFAULT_CUSTOM_CATEGORY


class LocalSettings:
    """JSON-file backed settings store."""

    def __init__(self, path: Path):
        self.path = path

    # ─────────────────────────────────────────────────────────────
    # Raw storage
    # ─────────────────────────────────────────────────────────────

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable settings file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings file {self.path}: top level is not an object")
            return {}
        return data

    def _get(self, name: str) -> Any:
        return self._load().get(SETTINGS_KEYS[name])

    def _set(self, name: str, value: Any):
        data = self._load()
        data[SETTINGS_KEYS[name]] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _discard(self, name: str, value: Any):
        logger.warning(f"Discarding malformed setting {SETTINGS_KEYS[name]}: {value!r}")

    # ─────────────────────────────────────────────────────────────
    # Typed accessors
    # ─────────────────────────────────────────────────────────────

    def get_enabled_by_id(self) -> dict[str, bool]:
        value = self._get("enabled_by_id")
        if value is None:
            return {}
        if not isinstance(value, dict):
            self._discard("enabled_by_id", value)
            return {}
        return {k: v for k, v in value.items() if isinstance(k, str) and isinstance(v, bool)}

    def set_enabled_by_id(self, enabled_by_id: dict[str, bool]):
        self._set("enabled_by_id", enabled_by_id)

    def get_custom_feeds(self) -> list[CustomFeed]:
        value = self._get("custom_feeds")
        if value is None:
            return []
        if not isinstance(value, list):
            self._discard("custom_feeds", value)
            return []

        feeds = []
        for entry in value:
            if not isinstance(entry, dict):
                continue
            feed = CustomFeed(
                id=str(entry.get("id") or ""),
                url=str(entry.get("url") or ""),
                source=str(entry.get("source") or ""),
                category=_category(entry.get("category")),
                enabled=entry.get("enabled") is not False,
                created_at=str(entry.get("created_at") or utc_now_iso()),
            )
            if feed.id and feed.url and feed.source:
                feeds.append(feed)
        return feeds

    def set_custom_feeds(self, feeds: list[CustomFeed]):
        self._set("custom_feeds", [asdict(feed) for feed in feeds])

    def get_global_enabled(self) -> bool:
        value = self._get("global_enabled")
        if value is None:
            return True
        if not isinstance(value, bool):
            self._discard("global_enabled", value)
            return True
        return value

    def set_global_enabled(self, enabled: bool):
        self._set("global_enabled", enabled)

    def get_triage_by_link(self) -> dict[str, TriageState]:
        value = self._get("triage_by_link")
        if value is None:
            return {}
        if not isinstance(value, dict):
            self._discard("triage_by_link", value)
            return {}

        triage = {}
        for link, entry in value.items():
            if not link or not isinstance(entry, dict):
                continue
            bucket = entry.get("bucket")
            if bucket not in BUCKETS:
                bucket = "inbox"
            triage[link] = TriageState(
                bucket=bucket,
                read=bucket == "archive" or bool(entry.get("read")),
                updated_at=str(entry.get("updated_at") or utc_now_iso()),
            )
        return triage

    def set_triage_by_link(self, triage: dict[str, TriageState]):
        self._set("triage_by_link", {link: asdict(state) for link, state in triage.items()})

    def get_saved_views(self) -> list[SavedView]:
        value = self._get("saved_views")
        if value is None:
            return []
        if not isinstance(value, list):
            self._discard("saved_views", value)
            return []

        views = []
        for entry in value:
            if not isinstance(entry, dict):
                continue
            view = SavedView(
                id=str(entry.get("id") or ""),
                category=_category(entry.get("category")),
                source=str(entry.get("source") or ""),
            )
            if view.id and view.source:
                views.append(view)
        return views

    def set_saved_views(self, views: list[SavedView]):
        self._set("saved_views", [asdict(view) for view in views])

    def save_view(self, category: str, source: str) -> SavedView:
        """Pin a category/source view; saving the same view twice is a no-op."""
        view = SavedView(id=f"{category}:{source}", category=_category(category), source=source)
        views = self.get_saved_views()
        if not any(existing.id == view.id for existing in views):
            self.set_saved_views(views + [view])
        return view

    def get_reading_mode(self) -> str:
        value = self._get("reading_mode")
        if value is None:
            return "headline"
        if value not in READING_MODES:
            self._discard("reading_mode", value)
            return "headline"
        return value

    def set_reading_mode(self, mode: str):
        if mode not in READING_MODES:
            raise ValueError(f'Invalid reading mode "{mode}"')
        self._set("reading_mode", mode)
