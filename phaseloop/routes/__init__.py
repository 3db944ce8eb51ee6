"""
API route modules.
"""

from .curation import router as curation_router
from .misc import router as misc_router
from .news import router as news_router
from .preview import router as preview_router
from .share import router as share_router

__all__ = [
    "curation_router",
    "misc_router",
    "news_router",
    "preview_router",
    "share_router",
]
