"""
Database facade - single entry point for the article store.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from .connection import DatabaseConnection
from .article_repository import ArticleRepository
from .models import DBArticle, UpsertResult

if TYPE_CHECKING:
    from ..feeds import FeedEntry


class Database:
    """
    Unified database access facade.

    Raises StoreConnectionError on construction when the store cannot be opened.
    """

    def __init__(self, db_path: Path):
        self._connection = DatabaseConnection(db_path)
        self.articles = ArticleRepository(self._connection)

    # ─────────────────────────────────────────────────────────────
    # Article operations (delegated to ArticleRepository)
    # ─────────────────────────────────────────────────────────────

    def upsert_articles(self, entries: Iterable["FeedEntry"]) -> UpsertResult:
        return self.articles.upsert_batch(entries)

    def get_all_articles(self) -> list[DBArticle]:
        return self.articles.get_all()

    def get_article_by_link(self, link: str) -> DBArticle | None:
        return self.articles.get_by_link(link)

    def count_articles(self) -> int:
        return self.articles.count()
