"""
News routes: the stored article list and manual ingestion.
"""

import logging
import sqlite3
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from ..auth import verify_api_key
from ..config import AppContext, get_context, get_db
from ..database import Database
from ..exceptions import require_resource
from ..schemas import ArticleResponse, RefreshResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/news", tags=["news"])


@router.get("")
async def list_news(
    db: Annotated[Database, Depends(get_db)]
) -> list[ArticleResponse]:
    """All stored articles, newest first."""
    try:
        articles = db.get_all_articles()
    except sqlite3.Error as e:
        logger.error(f"Failed to read articles: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve articles.")
    return [ArticleResponse.from_db(a) for a in articles]


@router.get("/article")
async def get_news_article(
    db: Annotated[Database, Depends(get_db)],
    link: str = Query(min_length=1),
) -> ArticleResponse:
    """Look up one stored article by its link."""
    article = require_resource(db.get_article_by_link(link), "Article not found")
    return ArticleResponse.from_db(article)


@router.post("/refresh", dependencies=[Depends(verify_api_key)])
async def refresh_news(
    context: Annotated[AppContext, Depends(get_context)],
    background_tasks: BackgroundTasks
) -> RefreshResponse:
    """Start an ingestion run in the background unless one is already in flight."""
    scheduler = context.scheduler
    if scheduler is None:
        raise HTTPException(status_code=503, detail="Ingestion is not configured")
    if scheduler.is_running:
        return RefreshResponse(started=False, message="Ingestion already in progress")

    background_tasks.add_task(scheduler.run_now)
    return RefreshResponse(started=True, message="Ingestion started")
