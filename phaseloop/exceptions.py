"""
Error types and HTTP exception helpers.

Domain errors are raised by the collaborators and recovered by the component
that owns the degradation (placeholder copy, empty image list, fallback image).
"""

from typing import Any, TypeVar

from fastapi import HTTPException

T = TypeVar("T")


class PhaseLoopError(Exception):
    """Base class for curator errors."""


class FeedFetchError(PhaseLoopError):
    """A feed could not be downloaded or parsed."""

    def __init__(self, feed_name: str, reason: str):
        self.feed_name = feed_name
        self.reason = reason
        super().__init__(f"{feed_name}: {reason}")


class StoreConnectionError(PhaseLoopError):
    """The article store could not be opened at startup."""


class ImageAcquisitionError(PhaseLoopError):
    """A source image could not be fetched, decoded or measured."""


class ImageSearchError(PhaseLoopError):
    """The image search collaborator failed."""


class CurationError(PhaseLoopError):
    """AI copy generation failed or returned unusable text."""


def require_resource(resource: T | None, detail: str = "Resource not found") -> T:
    """
    Raise 404 if resource is None, otherwise return the resource.

    Usage:
        article = require_resource(db.get_article_by_link(link), "Article not found")
    """
    if resource is None:
        raise HTTPException(status_code=404, detail=detail)
    return resource


def require_fields(payload: Any, *fields: str, detail: str = "Missing required data.") -> None:
    """Raise 400 unless every named attribute on payload is non-blank."""
    for name in fields:
        value = getattr(payload, name, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise HTTPException(status_code=400, detail=detail)
