"""
Database row converters - convert SQLite rows to dataclasses.
"""

import json
import logging
import sqlite3

from .models import DBItem, DBSource, DBUserAction

logger = logging.getLogger(__name__)


def row_to_source(row: sqlite3.Row) -> DBSource:
    """Convert a database row to a DBSource."""
    return DBSource(
        id=row["id"],
        name=row["name"],
        url=row["url"],
        type=row["type"],
        category=row["category"],
        enabled=bool(row["enabled"]),
        added_at=row["added_at"],
    )


def row_to_item(row: sqlite3.Row) -> DBItem:
    """Convert a database row (optionally joined with sources) to a DBItem."""
    keys = row.keys()
    return DBItem(
        id=row["id"],
        source_id=row["source_id"],
        title=row["title"],
        url=row["url"],
        author=row["author"],
        published_at=row["published_at"],
        fetched_at=row["fetched_at"],
        content_md=row["content_md"],
        content_text=row["content_text"],
        summary=row["summary"],
        score=float(row["score"] or 0.0),
        status=row["status"],
        acted_at=row["acted_at"],
        source_name=row["source_name"] if "source_name" in keys else None,
        source_category=row["source_category"] if "source_category" in keys else None,
    )


def row_to_action(row: sqlite3.Row) -> DBUserAction:
    """Convert a database row to a DBUserAction."""
    metadata = None
    if row["metadata_json"]:
        try:
            metadata = json.loads(row["metadata_json"])
        except json.JSONDecodeError:
            logger.warning(f"Ignoring malformed metadata on user action {row['id']}")

    return DBUserAction(
        id=row["id"],
        item_id=row["item_id"],
        action=row["action"],
        created_at=row["created_at"],
        metadata=metadata,
    )
