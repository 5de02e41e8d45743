"""
Database module - SQLite store for sources, items, user actions and metadata.

Uses repository pattern for better separation of concerns.
"""

from .connection import DatabaseConnection
from .errors import ItemNotFoundError, SourceNotFoundError, StoreError, StoreValidationError
from .models import (
    CATEGORIES,
    ITEM_STATUSES,
    SOURCE_TYPES,
    USER_ACTIONS,
    DBItem,
    DBSource,
    DBUserAction,
    ItemFilters,
    ItemInput,
    SourceInput,
)
from .source_repository import SourceRepository
from .item_repository import ItemRepository
from .action_repository import ActionRepository
from .metadata_repository import MetadataRepository
from .database import Database

__all__ = [
    "Database",
    "DatabaseConnection",
    "DBItem",
    "DBSource",
    "DBUserAction",
    "ItemFilters",
    "ItemInput",
    "SourceInput",
    "CATEGORIES",
    "ITEM_STATUSES",
    "SOURCE_TYPES",
    "USER_ACTIONS",
    "SourceRepository",
    "ItemRepository",
    "ActionRepository",
    "MetadataRepository",
    "StoreError",
    "StoreValidationError",
    "ItemNotFoundError",
    "SourceNotFoundError",
]
