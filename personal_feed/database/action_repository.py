"""
User action repository - append-only log of what the reader did with items.
"""

import json

from .connection import DatabaseConnection
from .converters import row_to_action
from .errors import StoreValidationError
from .models import DBUserAction, USER_ACTIONS


class ActionRepository:
    """Repository for the user action log."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def log(self, item_id: int, action: str, metadata: dict | None = None) -> int:
        """Append an action for an item. Returns the action id."""
        if action not in USER_ACTIONS:
            raise StoreValidationError(f'Invalid action "{action}" for item {item_id}')

        with self._db.conn() as conn:
            cursor = conn.execute(
                "INSERT INTO user_actions (item_id, action, metadata_json) VALUES (?, ?, ?)",
                (item_id, action, json.dumps(metadata) if metadata is not None else None)
            )
            return cursor.lastrowid

    def get_for_item(self, item_id: int) -> list[DBUserAction]:
        """Get actions for an item, oldest first."""
        with self._db.conn() as conn:
            rows = conn.execute(
                "SELECT * FROM user_actions WHERE item_id = ? ORDER BY id",
                (item_id,)
            ).fetchall()
            return [row_to_action(row) for row in rows]
