"""
Phase Loop Curator API Server

FastAPI application providing endpoints for:
- The ingested music news list (and manual refresh)
- AI curation of an article (copy plus candidate images)
- Preview rendering and simulated sharing
- Static files: rendered previews and the fallback image
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from . import __version__
from .config import AppContext, Config, config, configure_logging
from .curation import Curator
from .database import Database
from .feed_list import load_feed_list
from .feeds import FeedParser
from .image_search import GoogleImageSearch
from .ingestion import IngestionPipeline
from .preview import PreviewRenderer
from .providers import get_provider_from_env
from .rate_limit import setup_rate_limiting
from .routes import (
    curation_router,
    misc_router,
    news_router,
    preview_router,
    share_router,
)
from .scheduler import IngestionScheduler

logger = logging.getLogger(__name__)


def build_context(cfg: Config = config) -> AppContext:
    """
    Wire up the store, ingestion and curation services from configuration.

    Raises:
        StoreConnectionError: If the article store cannot be opened
        ValueError: If FEEDS_OPML points at an unusable file
    """
    db = Database(cfg.DB_PATH)
    logger.info(f"Article store ready at {cfg.DB_PATH}")

    feed_parser = FeedParser(timeout=cfg.FEED_TIMEOUT_SECONDS, max_entries=cfg.ENTRIES_PER_FEED)
    feeds = load_feed_list(cfg.FEEDS_OPML or None)
    pipeline = IngestionPipeline(feed_parser=feed_parser, db=db, feeds=feeds)

    provider = get_provider_from_env(
        google_key=cfg.GEMINI_API_KEY or None,
        anthropic_key=cfg.ANTHROPIC_API_KEY or None,
        openai_key=cfg.OPENAI_API_KEY or None,
        preferred_provider=cfg.LLM_PROVIDER or None,
        default_model=cfg.LLM_MODEL or None,
    )
    if provider:
        logger.info(f"LLM provider initialized: {provider.name} ({provider.default_model})")
    else:
        logger.warning(
            "No LLM API key configured. Set GEMINI_API_KEY, ANTHROPIC_API_KEY "
            "or OPENAI_API_KEY. Curation will return placeholder copy."
        )

    image_search = GoogleImageSearch(
        api_key=cfg.GEMINI_API_KEY,
        engine_id=cfg.GOOGLE_SEARCH_CX,
        timeout=cfg.IMAGE_SEARCH_TIMEOUT_SECONDS,
    )
    if not image_search.configured:
        logger.warning("Google Search CX or API key missing. Image search disabled.")

    curator = Curator(
        provider=provider,
        image_search=image_search,
        ai_timeout=cfg.AI_TIMEOUT_SECONDS,
        search_timeout=cfg.IMAGE_SEARCH_TIMEOUT_SECONDS,
    )
    preview_renderer = PreviewRenderer(
        public_dir=cfg.PUBLIC_DIR,
        fallback_path=cfg.FALLBACK_IMAGE,
        timeout=cfg.IMAGE_FETCH_TIMEOUT_SECONDS,
    )
    scheduler = IngestionScheduler(
        pipeline,
        interval_minutes=cfg.FETCH_INTERVAL_MINUTES,
        initial_delay_seconds=cfg.INITIAL_FETCH_DELAY_SECONDS,
    )

    return AppContext(
        db=db,
        feed_parser=feed_parser,
        pipeline=pipeline,
        curator=curator,
        preview_renderer=preview_renderer,
        scheduler=scheduler,
    )


def create_app(context: AppContext | None = None, public_dir: Path | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    When a context is passed (tests) it is used as-is and the scheduler is
    left alone; otherwise the context is built from configuration at startup
    and the scheduler is started when ENABLE_SCHEDULER is on.
    """

    static_dir = public_dir or config.PUBLIC_DIR

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        static_dir.mkdir(parents=True, exist_ok=True)
        owns_context = getattr(app.state, "context", None) is None
        if owns_context:
            app.state.context = build_context(config)
            if config.ENABLE_SCHEDULER:
                await app.state.context.scheduler.start()
            else:
                logger.info("Scheduler disabled (ENABLE_SCHEDULER=false)")

        yield

        scheduler = app.state.context.scheduler
        if owns_context and scheduler is not None:
            await scheduler.stop()

    app = FastAPI(
        title="Phase Loop Curator API",
        version=__version__,
        lifespan=lifespan,
    )
    if context is not None:
        app.state.context = context

    setup_rate_limiting(app)

    app.include_router(misc_router)
    app.include_router(news_router)
    app.include_router(curation_router)
    app.include_router(preview_router)
    app.include_router(share_router)

    # Mounted last so the API routes take precedence; the directory is created at startup
    app.mount("/", StaticFiles(directory=static_dir, check_dir=False), name="public")

    return app


app = create_app()


def main():
    """Run the API server with uvicorn."""
    configure_logging()
    uvicorn.run("phaseloop.server:app", host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    main()
