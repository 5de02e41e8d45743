"""
Database facade - provides unified access to all repositories.
"""

from pathlib import Path

from .connection import DatabaseConnection
from .source_repository import SourceRepository
from .item_repository import ItemRepository
from .action_repository import ActionRepository
from .metadata_repository import MetadataRepository
from .models import DBItem, DBSource, DBUserAction, ItemFilters, ItemInput, SourceInput


class Database:
    """
    Unified database access facade.

    Opening a Database applies the schema migration; callers then use the
    delegating methods or the repositories directly.
    """

    def __init__(self, db_path: Path):
        self._connection = DatabaseConnection(db_path)

        self.sources = SourceRepository(self._connection)
        self.items = ItemRepository(self._connection)
        self.actions = ActionRepository(self._connection)
        self.metadata = MetadataRepository(self._connection)

    # ─────────────────────────────────────────────────────────────
    # Source operations (delegated to SourceRepository)
    # ─────────────────────────────────────────────────────────────

    def upsert_source(self, source: SourceInput):
        return self.sources.upsert(source)

    def get_source(self, source_id: str) -> DBSource | None:
        return self.sources.get(source_id)

    def get_sources(self, enabled_only: bool = False) -> list[DBSource]:
        return self.sources.get_all(enabled_only)

    def set_source_enabled(self, source_id: str, enabled: bool):
        return self.sources.set_enabled(source_id, enabled)

    # ─────────────────────────────────────────────────────────────
    # Item operations (delegated to ItemRepository)
    # ─────────────────────────────────────────────────────────────

    def upsert_item(self, item: ItemInput):
        return self.items.upsert(item)

    def update_item_status(self, url: str, status: str):
        return self.items.update_status(url, status)

    def get_item(self, item_id: int) -> DBItem | None:
        return self.items.get(item_id)

    def get_item_by_url(self, url: str) -> DBItem | None:
        return self.items.get_by_url(url)

    def get_items(self, filters: ItemFilters | None = None) -> list[DBItem]:
        return self.items.get_many(filters)

    def count_items(self) -> int:
        return self.items.count()

    # ─────────────────────────────────────────────────────────────
    # User actions (delegated to ActionRepository)
    # ─────────────────────────────────────────────────────────────

    def log_action(self, item_id: int, action: str, metadata: dict | None = None) -> int:
        return self.actions.log(item_id, action, metadata)

    def get_actions(self, item_id: int) -> list[DBUserAction]:
        return self.actions.get_for_item(item_id)

    # ─────────────────────────────────────────────────────────────
    # Metadata (delegated to MetadataRepository)
    # ─────────────────────────────────────────────────────────────

    def get_metadata(self, key: str) -> str | None:
        return self.metadata.get(key)

    def set_metadata(self, key: str, value: str | None):
        return self.metadata.set(key, value)

    def advance_metadata(self, key: str, value: str) -> str:
        return self.metadata.advance(key, value)
