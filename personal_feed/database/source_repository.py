"""
Source repository - operations for feed sources.
"""

from .connection import DatabaseConnection
from .converters import row_to_source
from .errors import SourceNotFoundError, StoreValidationError
from .models import CATEGORIES, DBSource, SOURCE_TYPES, SourceInput
from ..timestamps import utc_now_iso


class SourceRepository:
    """Repository for source operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def upsert(self, source: SourceInput):
        """
        Insert or update a source keyed by id.

        On conflict the name, url, type, category and enabled flag are
        replaced; ``added_at`` keeps its first value.
        """
        for field_name in ("id", "name", "url"):
            if not (getattr(source, field_name) or "").strip():
                raise StoreValidationError(
                    f'upsert_source requires {field_name} (source "{source.id}")'
                )
        if source.type not in SOURCE_TYPES:
            raise StoreValidationError(f'Invalid source type "{source.type}" for "{source.id}"')
        if source.category not in CATEGORIES:
            raise StoreValidationError(f'Invalid category "{source.category}" for "{source.id}"')

        with self._db.conn() as conn:
            conn.execute(
                """INSERT INTO sources (id, name, url, type, category, enabled, added_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                   name = excluded.name,
                   url = excluded.url,
                   type = excluded.type,
                   category = excluded.category,
                   enabled = excluded.enabled""",
                (
                    source.id,
                    source.name,
                    source.url,
                    source.type,
                    source.category,
                    1 if source.enabled else 0,
                    source.added_at or utc_now_iso(),
                )
            )

    def get(self, source_id: str) -> DBSource | None:
        """Get a single source by id."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM sources WHERE id = ?", (source_id,)
            ).fetchone()
            return row_to_source(row) if row else None

    def get_all(self, enabled_only: bool = False) -> list[DBSource]:
        """Get all sources ordered by category then name."""
        query = "SELECT * FROM sources"
        if enabled_only:
            query += " WHERE enabled = 1"
        query += " ORDER BY category, name"

        with self._db.conn() as conn:
            rows = conn.execute(query).fetchall()
            return [row_to_source(row) for row in rows]

    def get_by_ids(self, source_ids: list[str]) -> dict[str, DBSource]:
        """Get sources for the given ids, keyed by id."""
        if not source_ids:
            return {}
        placeholders = ",".join("?" * len(source_ids))
        with self._db.conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM sources WHERE id IN ({placeholders})", source_ids
            ).fetchall()
            return {row["id"]: row_to_source(row) for row in rows}

    def set_enabled(self, source_id: str, enabled: bool):
        """Toggle whether a source is fetched."""
        with self._db.conn() as conn:
            cursor = conn.execute(
                "UPDATE sources SET enabled = ? WHERE id = ?",
                (1 if enabled else 0, source_id)
            )
            if cursor.rowcount == 0:
                raise SourceNotFoundError(source_id)
