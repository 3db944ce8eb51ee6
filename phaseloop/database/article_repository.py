"""
Article repository - upsert and read operations for articles.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable

from .connection import DatabaseConnection
from .converters import row_to_article, to_db_timestamp
from .models import DBArticle, UpsertResult

if TYPE_CHECKING:
    from ..feeds import FeedEntry

logger = logging.getLogger(__name__)

# Stay well under SQLite's host-parameter limit for IN (...) lookups
_LOOKUP_CHUNK = 500

_UPSERT_SQL = """
    INSERT INTO articles
        (source, title, link, pub_date, original_image_url, fetched_at, created_at)
    VALUES (?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT(link) DO UPDATE SET
        source = excluded.source,
        title = excluded.title,
        pub_date = excluded.pub_date,
        original_image_url = excluded.original_image_url,
        fetched_at = excluded.fetched_at
"""


class ArticleRepository:
    """Repository for article operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def upsert_batch(self, entries: Iterable["FeedEntry"]) -> UpsertResult:
        """
        Insert or update articles keyed by link in one bulk statement.

        Every written row gets fetched_at stamped with the write time. If the
        bulk write fails, rows are retried one at a time; rows that still fail
        are counted and logged rather than raised.
        """
        written_at = to_db_timestamp(datetime.now(timezone.utc))
        rows = [
            (
                entry.source,
                entry.title,
                entry.link,
                to_db_timestamp(entry.pub_date),
                entry.original_image_url,
                written_at,
                written_at,
            )
            for entry in entries
        ]
        result = UpsertResult()
        if not rows:
            return result

        with self._db.conn() as conn:
            existing = self._existing_links(conn, [row[2] for row in rows])
            try:
                conn.executemany(_UPSERT_SQL, rows)
                result.updated = sum(1 for row in rows if row[2] in existing)
                result.inserted = len(rows) - result.updated
                return result
            except sqlite3.Error as e:
                conn.rollback()
                logger.error(f"Bulk upsert of {len(rows)} articles failed, retrying per row: {e}")

            for row in rows:
                try:
                    conn.execute(_UPSERT_SQL, row)
                except sqlite3.Error as e:
                    result.failed += 1
                    logger.error(f"Failed to upsert article {row[2]}: {e}")
                    continue
                if row[2] in existing:
                    result.updated += 1
                else:
                    result.inserted += 1

        return result

    def get_all(self) -> list[DBArticle]:
        """Get every stored article, newest first."""
        with self._db.conn() as conn:
            rows = conn.execute(
                "SELECT * FROM articles ORDER BY pub_date DESC, fetched_at DESC, id DESC"
            ).fetchall()
            return [row_to_article(row) for row in rows]

    def get_by_link(self, link: str) -> DBArticle | None:
        """Get article by link."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM articles WHERE link = ?", (link,)
            ).fetchone()
            return row_to_article(row) if row else None

    def count(self) -> int:
        """Number of stored articles."""
        with self._db.conn() as conn:
            return conn.execute("SELECT COUNT(*) FROM articles").fetchone()[0]

    def _existing_links(self, conn: sqlite3.Connection, links: list[str]) -> set[str]:
        """Return which of the given links are already stored."""
        found: set[str] = set()
        unique = list(dict.fromkeys(links))
        for start in range(0, len(unique), _LOOKUP_CHUNK):
            chunk = unique[start:start + _LOOKUP_CHUNK]
            placeholders = ", ".join("?" for _ in chunk)
            rows = conn.execute(
                f"SELECT link FROM articles WHERE link IN ({placeholders})", chunk
            ).fetchall()
            found.update(row["link"] for row in rows)
        return found
