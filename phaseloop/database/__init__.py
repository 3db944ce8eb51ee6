"""
Database module - SQLite storage for ingested articles.

Uses repository pattern for better separation of concerns.
"""

from .connection import DatabaseConnection
from .models import DBArticle, UpsertResult
from .article_repository import ArticleRepository
from .database import Database

__all__ = [
    "Database",
    "DatabaseConnection",
    "DBArticle",
    "UpsertResult",
    "ArticleRepository",
]
