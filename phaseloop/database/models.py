"""
Database models - dataclasses for database entities.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class DBArticle:
    id: int
    source: str
    title: str
    link: str  # Identity key: one row per link
    pub_date: datetime
    fetched_at: datetime
    created_at: datetime
    original_image_url: str | None = None


@dataclass
class UpsertResult:
    """Outcome of one bulk upsert."""
    inserted: int = 0
    updated: int = 0
    failed: int = 0

    @property
    def written(self) -> int:
        return self.inserted + self.updated
