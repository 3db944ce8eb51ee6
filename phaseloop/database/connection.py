"""
Database connection management and schema initialization.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..exceptions import StoreConnectionError


class DatabaseConnection:
    """Manages database connection and schema."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_schema()
        except (OSError, sqlite3.Error) as e:
            raise StoreConnectionError(f"Cannot open article store at {db_path}: {e}") from e

    @contextmanager
    def conn(self) -> Iterator[sqlite3.Connection]:
        """Get database connection with row factory."""
        connection = sqlite3.connect(self.db_path)
        connection.row_factory = sqlite3.Row
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _init_schema(self):
        """Initialize database schema."""
        with self.conn() as connection:
            connection.executescript("""
                CREATE TABLE IF NOT EXISTS articles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    source TEXT NOT NULL,
                    title TEXT NOT NULL,
                    link TEXT UNIQUE NOT NULL,
                    pub_date TIMESTAMP NOT NULL,
                    original_image_url TEXT,
                    fetched_at TIMESTAMP NOT NULL,
                    created_at TIMESTAMP NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_articles_pub_date ON articles(pub_date DESC);
            """)
