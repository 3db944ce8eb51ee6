"""
Configuration and application context.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from fastapi import HTTPException, Request

if TYPE_CHECKING:
    from .curation import Curator
    from .database import Database
    from .feeds import FeedParser
    from .ingestion import IngestionPipeline
    from .preview import PreviewRenderer
    from .scheduler import IngestionScheduler

# Load environment variables
load_dotenv()


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


class Config:
    """Application configuration from environment."""
    # Gemini is the default copywriter; the same Google key drives image search
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "") or os.getenv("GOOGLE_API_KEY", "")
    ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")

    # Preferred provider: "google", "anthropic", or "openai"
    # If not set, uses the first available key in order: Google > Anthropic > OpenAI
    LLM_PROVIDER: str = os.getenv("LLM_PROVIDER", "")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "")

    # Google Custom Search engine id (image search)
    GOOGLE_SEARCH_CX: str = os.getenv("GOOGLE_SEARCH_CX", "")

    DB_PATH: Path = Path(os.getenv("DB_PATH", "./data/articles.db"))
    PUBLIC_DIR: Path = Path(os.getenv("PUBLIC_DIR", "./public"))
    FALLBACK_IMAGE: str = os.getenv("FALLBACK_IMAGE", "/fallback.png")
    PORT: int = int(os.getenv("PORT", "3000"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Ingestion
    ENABLE_SCHEDULER: bool = _parse_bool(os.getenv("ENABLE_SCHEDULER"), default=True)
    FETCH_INTERVAL_MINUTES: int = int(os.getenv("FETCH_INTERVAL_MINUTES", "120"))
    INITIAL_FETCH_DELAY_SECONDS: float = float(os.getenv("INITIAL_FETCH_DELAY_SECONDS", "10"))
    FEEDS_OPML: str = os.getenv("FEEDS_OPML", "")
    ENTRIES_PER_FEED: int = int(os.getenv("ENTRIES_PER_FEED", "5"))
    FEED_TIMEOUT_SECONDS: int = int(os.getenv("FEED_TIMEOUT_SECONDS", "30"))

    # Timeouts for the request-path collaborators
    AI_TIMEOUT_SECONDS: float = float(os.getenv("AI_TIMEOUT_SECONDS", "60"))
    IMAGE_SEARCH_TIMEOUT_SECONDS: float = float(os.getenv("IMAGE_SEARCH_TIMEOUT_SECONDS", "15"))
    IMAGE_FETCH_TIMEOUT_SECONDS: int = int(os.getenv("IMAGE_FETCH_TIMEOUT_SECONDS", "20"))

    # Access control
    AUTH_API_KEY: str = os.getenv("AUTH_API_KEY", "")
    RATE_LIMIT_PER_MINUTE: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "30"))


config = Config()


def configure_logging(level: str | None = None):
    """Set up the root logger once for the whole process."""
    logging.basicConfig(
        level=(level or config.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@dataclass
class AppContext:
    """
    Services shared by the request handlers and the scheduler.

    Built once at startup and handed to the app; tests build their own
    with doubles in place of the network collaborators.
    """
    db: "Database"
    feed_parser: "FeedParser"
    pipeline: "IngestionPipeline"
    curator: "Curator"
    preview_renderer: "PreviewRenderer"
    scheduler: "IngestionScheduler | None" = None


def get_context(request: Request) -> AppContext:
    """Dependency to get the application context."""
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(status_code=500, detail="Application not initialized")
    return context


def get_db(request: Request) -> "Database":
    """Dependency to get database instance."""
    return get_context(request).db
