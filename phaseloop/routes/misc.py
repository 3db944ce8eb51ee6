"""
Miscellaneous routes: liveness text and health check.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from .. import __version__
from ..config import AppContext, get_context

router = APIRouter(tags=["misc"])


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "Phase Loop Records API is running!"


@router.get("/status")
async def health_check(
    context: Annotated[AppContext, Depends(get_context)]
) -> dict:
    """API health check."""
    scheduler = context.scheduler
    return {
        "status": "ok",
        "version": __version__,
        "ai_enabled": context.curator.ai_enabled,
        "image_search_enabled": context.curator.image_search_enabled,
        "ingestion_running": scheduler.is_running if scheduler else False,
        "article_count": context.db.count_articles(),
    }
