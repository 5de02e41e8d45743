"""
Item repository - upsert, status updates and queries for feed items.
"""

import sqlite3

from .connection import DatabaseConnection
from .converters import row_to_item
from .errors import ItemNotFoundError, StoreError, StoreValidationError
from .models import DBItem, ITEM_STATUSES, ItemFilters, ItemInput, ORDER_COLUMNS
from ..timestamps import SQL_NOW

_SELECT_JOINED = """
    SELECT i.*, s.name AS source_name, s.category AS source_category
    FROM items i JOIN sources s ON s.id = i.source_id
"""


class ItemRepository:
    """Repository for item operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def upsert(self, item: ItemInput):
        """
        Insert an item or merge it into the existing row with the same url.

        Merge rules: source_id and title take the incoming value; author,
        published_at, content and summary keep the stored value when the
        incoming one is missing; score keeps the maximum; status and
        acted_at are never touched by a merge.
        """
        for field_name in ("source_id", "url", "title"):
            if not (getattr(item, field_name) or "").strip():
                raise StoreValidationError(
                    f'upsert_item requires {field_name} (url "{item.url}")'
                )
        if item.status not in ITEM_STATUSES:
            raise StoreValidationError(f'Invalid status "{item.status}" for url "{item.url}"')

        try:
            with self._db.conn() as conn:
                conn.execute(
                    f"""INSERT INTO items (source_id, title, url, author, published_at,
                            content_md, content_text, summary, score, status, acted_at)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                        ON CONFLICT(url) DO UPDATE SET
                        source_id = excluded.source_id,
                        title = excluded.title,
                        author = COALESCE(excluded.author, items.author),
                        published_at = COALESCE(excluded.published_at, items.published_at),
                        content_md = COALESCE(excluded.content_md, items.content_md),
                        content_text = COALESCE(excluded.content_text, items.content_text),
                        summary = COALESCE(excluded.summary, items.summary),
                        score = CASE WHEN excluded.score > items.score
                                THEN excluded.score ELSE items.score END,
                        fetched_at = {SQL_NOW}""",
                    (
                        item.source_id,
                        item.title,
                        item.url,
                        item.author,
                        item.published_at,
                        item.content_md,
                        item.content_text,
                        item.summary,
                        item.score or 0.0,
                        item.status,
                        item.acted_at,
                    )
                )
        except sqlite3.Error as e:
            raise StoreError(f'Failed to upsert item "{item.url}": {e}') from e

    def update_status(self, url: str, status: str):
        """Set an item's status and stamp acted_at. Raises ItemNotFoundError if no row matches."""
        if status not in ITEM_STATUSES:
            raise StoreValidationError(f'Invalid status "{status}" for url "{url}"')

        with self._db.conn() as conn:
            cursor = conn.execute(
                f"UPDATE items SET status = ?, acted_at = {SQL_NOW} WHERE url = ?",
                (status, url)
            )
            if cursor.rowcount == 0:
                raise ItemNotFoundError(url)

    def get(self, item_id: int) -> DBItem | None:
        """Get a single item by id."""
        with self._db.conn() as conn:
            row = conn.execute(
                _SELECT_JOINED + " WHERE i.id = ?", (item_id,)
            ).fetchone()
            return row_to_item(row) if row else None

    def get_by_url(self, url: str) -> DBItem | None:
        """Get a single item by its url."""
        with self._db.conn() as conn:
            row = conn.execute(
                _SELECT_JOINED + " WHERE i.url = ?", (url,)
            ).fetchone()
            return row_to_item(row) if row else None

    def get_many(self, filters: ItemFilters | None = None) -> list[DBItem]:
        """Get items matching the filters, joined with their source."""
        filters = filters or ItemFilters()
        conditions = []
        params: list = []

        if filters.status:
            statuses = [filters.status] if isinstance(filters.status, str) else list(filters.status)
            conditions.append(f"i.status IN ({','.join('?' * len(statuses))})")
            params.extend(statuses)

        if filters.source_id:
            conditions.append("i.source_id = ?")
            params.append(filters.source_id)

        if filters.category:
            conditions.append("s.category = ?")
            params.append(filters.category)

        if filters.min_score is not None:
            conditions.append("i.score >= ?")
            params.append(filters.min_score)

        if filters.order_by not in ORDER_COLUMNS:
            raise StoreValidationError(f'Invalid order column "{filters.order_by}"')
        order_dir = filters.order_dir.upper()
        if order_dir not in ("ASC", "DESC"):
            raise StoreValidationError(f'Invalid order direction "{filters.order_dir}"')

        if filters.order_by == "published_at":
            order_expr = "COALESCE(i.published_at, i.fetched_at)"
        else:
            order_expr = f"i.{filters.order_by}"

        query = _SELECT_JOINED
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += f" ORDER BY {order_expr} {order_dir}, i.id {order_dir} LIMIT ? OFFSET ?"
        params.extend([filters.limit, filters.offset])

        with self._db.conn() as conn:
            rows = conn.execute(query, params).fetchall()
            return [row_to_item(row) for row in rows]

    def count(self) -> int:
        """Total number of stored items."""
        with self._db.conn() as conn:
            return conn.execute("SELECT COUNT(*) FROM items").fetchone()[0]
