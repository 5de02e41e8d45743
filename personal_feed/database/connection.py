"""
Database connection management and schema migration.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..timestamps import SQL_NOW

logger = logging.getLogger(__name__)


SCHEMA_SQL = f"""
-- Sources: RSS, HTML, or email feeds we pull from
CREATE TABLE IF NOT EXISTS sources (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    url TEXT NOT NULL,
    type TEXT NOT NULL DEFAULT 'rss' CHECK (type IN ('rss', 'html', 'email')),
    category TEXT NOT NULL,
    enabled INTEGER NOT NULL DEFAULT 1,
    added_at TEXT NOT NULL DEFAULT ({SQL_NOW})
);

-- Items: individual feed entries, identified by url
CREATE TABLE IF NOT EXISTS items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    source_id TEXT NOT NULL REFERENCES sources(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    url TEXT NOT NULL UNIQUE,
    author TEXT,
    published_at TEXT,
    fetched_at TEXT NOT NULL DEFAULT ({SQL_NOW}),
    content_md TEXT,
    content_text TEXT,
    summary TEXT,
    score REAL DEFAULT 0.0,
    status TEXT NOT NULL DEFAULT 'unread'
        CHECK (status IN ('unread', 'read', 'clipped', 'dismissed', 'saved')),
    acted_at TEXT
);

-- Interest tags for future scoring
CREATE TABLE IF NOT EXISTS interest_tags (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    weight REAL NOT NULL DEFAULT 0.5,
    created_at TEXT NOT NULL DEFAULT ({SQL_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({SQL_NOW})
);

CREATE TABLE IF NOT EXISTS item_tags (
    item_id INTEGER NOT NULL REFERENCES items(id) ON DELETE CASCADE,
    tag_id INTEGER NOT NULL REFERENCES interest_tags(id) ON DELETE CASCADE,
    match_score REAL DEFAULT 0.0,
    PRIMARY KEY (item_id, tag_id)
);

-- Append-only log of user actions
CREATE TABLE IF NOT EXISTS user_actions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id INTEGER NOT NULL REFERENCES items(id) ON DELETE CASCADE,
    action TEXT NOT NULL
        CHECK (action IN ('clip', 'dismiss', 'content_idea', 'save', 'read')),
    created_at TEXT NOT NULL DEFAULT ({SQL_NOW}),
    metadata_json TEXT
);

-- App metadata (sync cursor, version flags)
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT
);

CREATE INDEX IF NOT EXISTS idx_items_status ON items(status);
CREATE INDEX IF NOT EXISTS idx_items_source ON items(source_id);
CREATE INDEX IF NOT EXISTS idx_items_published ON items(published_at DESC);
CREATE INDEX IF NOT EXISTS idx_items_score ON items(score DESC);
"""


def split_statements(sql: str) -> list[str]:
    """Split a migration script into statements, dropping ``--`` comment lines."""
    lines = [line for line in sql.splitlines() if not line.strip().startswith("--")]
    return [stmt.strip() for stmt in "\n".join(lines).split(";") if stmt.strip()]


class DatabaseConnection:
    """Manages database connection and schema."""

    def __init__(self, db_path: Path, schema_sql: str = SCHEMA_SQL):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._migrate(schema_sql)

    @contextmanager
    def conn(self) -> Iterator[sqlite3.Connection]:
        """Get database connection with row factory."""
        connection = sqlite3.connect(self.db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON")
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _migrate(self, schema_sql: str):
        """
        Apply the schema as a single transaction.

        Either every statement applies or none does; the failing
        statement's error propagates after the rollback.
        """
        statements = split_statements(schema_sql)
        connection = sqlite3.connect(self.db_path, isolation_level=None)
        try:
            connection.execute("BEGIN")
            try:
                for statement in statements:
                    connection.execute(statement)
                connection.execute("COMMIT")
            except sqlite3.Error:
                connection.execute("ROLLBACK")
                logger.error(f"Schema migration failed for {self.db_path}, rolled back")
                raise
        finally:
            connection.close()
        logger.debug(f"Applied {len(statements)} schema statements to {self.db_path}")
