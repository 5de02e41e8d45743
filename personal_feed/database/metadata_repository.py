"""
Metadata repository - app key/value state such as the sync cursor.
"""

from .connection import DatabaseConnection
from .errors import StoreValidationError


class MetadataRepository:
    """Repository for app metadata."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def get(self, key: str) -> str | None:
        """Get a metadata value, or None when the key is absent."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT value FROM metadata WHERE key = ?", (key,)
            ).fetchone()
            return row["value"] if row else None

    def set(self, key: str, value: str | None):
        """Set a metadata value."""
        if not key.strip():
            raise StoreValidationError("set_metadata requires key")

        with self._db.conn() as conn:
            conn.execute(
                """INSERT INTO metadata (key, value) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
                (key, value)
            )

    def advance(self, key: str, value: str) -> str:
        """
        Store an ISO timestamp only if it is newer than the stored one.

        Returns the value held after the write.
        """
        if not key.strip():
            raise StoreValidationError("set_metadata requires key")

        with self._db.conn() as conn:
            conn.execute(
                """INSERT INTO metadata (key, value) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value
                   WHERE metadata.value IS NULL OR excluded.value > metadata.value""",
                (key, value)
            )
            row = conn.execute(
                "SELECT value FROM metadata WHERE key = ?", (key,)
            ).fetchone()
            return row["value"]
