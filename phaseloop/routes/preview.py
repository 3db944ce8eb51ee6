"""
Preview route: render the caption band onto the chosen image.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from ..auth import verify_api_key
from ..config import AppContext, get_context
from ..exceptions import require_fields
from ..rate_limit import expensive_limit
from ..schemas import PreviewRequest, PreviewResponse

router = APIRouter(prefix="/api", tags=["preview"], dependencies=[Depends(verify_api_key)])


@router.post("/generate-simple-preview")
@expensive_limit
async def generate_simple_preview(
    request: Request,
    payload: PreviewRequest,
    context: Annotated[AppContext, Depends(get_context)]
) -> PreviewResponse:
    """Render a preview; an image that cannot be used yields the fallback path."""
    require_fields(payload, "image_url", "headline", "description", detail="Missing data for preview.")
    path = await context.preview_renderer.render(payload.image_url, payload.headline, payload.description)
    return PreviewResponse(preview_image_path=path)
