"""
Curation routes: AI copy plus images for one article, and image paging.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from ..auth import verify_api_key
from ..config import AppContext, get_context
from ..curation import ArticleBrief
from ..exceptions import require_fields
from ..rate_limit import expensive_limit
from ..schemas import (
    CuratedContentResponse,
    CurateRequest,
    ImageSearchRequest,
    ImageSearchResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["curation"], dependencies=[Depends(verify_api_key)])


@router.post("/curate")
@expensive_limit
async def curate_article(
    request: Request,
    payload: CurateRequest,
    context: Annotated[AppContext, Depends(get_context)]
) -> CuratedContentResponse:
    """
    Generate headline, description and caption for an article.

    AI failures come back as placeholder copy with failed=true rather than
    an error status, so the editor can still pick an image.
    """
    require_fields(payload, "title", detail="Missing article data.")
    article = ArticleBrief(title=payload.title.strip(), source=(payload.source or "").strip() or "Unknown")

    logger.info(f"Curating: {article.title}")
    content = await context.curator.curate(article)
    return CuratedContentResponse.from_content(content)


@router.post("/images/search")
@expensive_limit
async def search_images(
    request: Request,
    payload: ImageSearchRequest,
    context: Annotated[AppContext, Depends(get_context)]
) -> ImageSearchResponse:
    """Search images for a query; start selects the next page."""
    require_fields(payload, "query", detail="Missing search query.")
    images = await context.curator.search_images(payload.query.strip(), start=payload.start)
    return ImageSearchResponse(images=images)
