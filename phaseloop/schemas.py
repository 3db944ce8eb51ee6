"""
Pydantic models for API request/response validation.

Field names are snake_case in Python and camelCase on the wire
(pubDate, originalImageUrl, previewImagePath, ...), which is what the
editor frontend sends and expects.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .curation import CuratedContent
from .database import DBArticle


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ─────────────────────────────────────────────────────────────
# Article Schemas
# ─────────────────────────────────────────────────────────────

class ArticleResponse(CamelModel):
    """Stored article as listed in the news feed."""
    id: int
    source: str
    title: str
    link: str
    pub_date: str
    original_image_url: str | None = None
    fetched_at: str

    @classmethod
    def from_db(cls, article: DBArticle) -> "ArticleResponse":
        return cls(
            id=article.id,
            source=article.source,
            title=article.title,
            link=article.link,
            pub_date=article.pub_date.isoformat(),
            original_image_url=article.original_image_url,
            fetched_at=article.fetched_at.isoformat(),
        )


class RefreshResponse(CamelModel):
    """Result of a manual ingestion trigger."""
    started: bool
    message: str


# ─────────────────────────────────────────────────────────────
# Curation Schemas
# ─────────────────────────────────────────────────────────────

class CurateRequest(CamelModel):
    """
    Article sent by the editor for curation.

    Fields are optional at the parsing layer so that a missing title is a
    400 from the route rather than a validation error.
    """
    title: str | None = None
    source: str | None = None
    link: str | None = None
    pub_date: str | None = None
    original_image_url: str | None = None


class CuratedContentResponse(CamelModel):
    """AI copy plus candidate images."""
    headline: str
    description: str
    caption: str
    images: list[str]
    original_source: str | None = None
    failed: bool = False

    @classmethod
    def from_content(cls, content: CuratedContent) -> "CuratedContentResponse":
        return cls(
            headline=content.headline,
            description=content.description,
            caption=content.caption,
            images=content.images,
            original_source=content.original_source,
            failed=content.failed,
        )


class ImageSearchRequest(CamelModel):
    """Follow-up image search, e.g. the next page for the same article."""
    query: str | None = None
    start: int | None = None


class ImageSearchResponse(CamelModel):
    images: list[str]


# ─────────────────────────────────────────────────────────────
# Preview / Share Schemas
# ─────────────────────────────────────────────────────────────

class PreviewRequest(CamelModel):
    image_url: str | None = None
    headline: str | None = None
    description: str | None = None


class PreviewResponse(CamelModel):
    preview_image_path: str


class ShareRequest(CamelModel):
    image_path: str | None = None
    caption: str | None = None
    platform: str | None = None


class ShareResponse(CamelModel):
    success: bool
    message: str
