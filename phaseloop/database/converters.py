"""
Database row converters - convert SQLite rows to dataclasses.
"""

import sqlite3
from datetime import datetime, timezone

from .models import DBArticle


def to_db_timestamp(value: datetime) -> str:
    """Serialize a datetime as a fixed-width UTC ISO string so text order matches time order."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_db_timestamp(value: str | None) -> datetime | None:
    """Parse a stored timestamp back into an aware datetime."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def row_to_article(row: sqlite3.Row) -> DBArticle:
    """Convert a database row to a DBArticle."""
    now = datetime.now(timezone.utc)
    fetched_at = from_db_timestamp(row["fetched_at"]) or now

    return DBArticle(
        id=row["id"],
        source=row["source"],
        title=row["title"],
        link=row["link"],
        pub_date=from_db_timestamp(row["pub_date"]) or fetched_at,
        fetched_at=fetched_at,
        created_at=from_db_timestamp(row["created_at"]) or fetched_at,
        original_image_url=row["original_image_url"],
    )
