"""
Share route: simulated publishing of a finished preview.

Nothing is posted anywhere; the request is logged and acknowledged.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..auth import verify_api_key
from ..exceptions import require_fields
from ..schemas import ShareRequest, ShareResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["share"], dependencies=[Depends(verify_api_key)])

RESTRICTED_PLATFORMS = {"Instagram Story"}


@router.post("/share")
async def share(payload: ShareRequest) -> ShareResponse:
    require_fields(payload, "platform", detail="Missing share platform.")
    logger.info(f"Share request: platform={payload.platform} image={payload.image_path}")

    if payload.platform in RESTRICTED_PLATFORMS:
        raise HTTPException(status_code=403, detail=f"{payload.platform} posting via API is restricted.")

    return ShareResponse(success=True, message=f"Successfully simulated sharing to {payload.platform}!")
