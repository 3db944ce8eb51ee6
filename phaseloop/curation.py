"""
Curation - AI marketing copy and candidate images for one article.

Features:
- Fixed copywriting prompt for the Phase Loop Records voice
- Tolerant parsing of the model's JSON reply
- Image search run alongside the AI call
- Degrades to placeholder copy or an empty image list instead of failing
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .exceptions import CurationError, ImageSearchError

if TYPE_CHECKING:
    from .image_search import GoogleImageSearch
    from .providers import LLMProvider

logger = logging.getLogger(__name__)

COPY_FIELDS = ("headline", "description", "caption")

FAILED_HEADLINE = "AI Failed"
FAILED_DESCRIPTION = "Try again."
FAILED_CAPTION = "Error."

_FENCE_RE = re.compile(r"```(?:json|JSON)?")


@dataclass
class ArticleBrief:
    """The parts of an article the curator needs."""
    title: str
    source: str


@dataclass
class CurationCopy:
    """AI-written copy for one article."""
    headline: str
    description: str
    caption: str


@dataclass
class CurationParseResult:
    """Either parsed copy or the reason the reply was unusable."""
    copy: CurationCopy | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.copy is not None


@dataclass
class CuratedContent:
    """Copy plus candidate images, returned to the editor."""
    headline: str
    description: str
    caption: str
    images: list[str] = field(default_factory=list)
    original_source: str | None = None
    failed: bool = False

    @classmethod
    def placeholder(cls, images: list[str], original_source: str | None) -> "CuratedContent":
        """Fixed content shown when the AI step fails."""
        return cls(
            headline=FAILED_HEADLINE,
            description=FAILED_DESCRIPTION,
            caption=FAILED_CAPTION,
            images=images,
            original_source=original_source,
            failed=True,
        )


def parse_curation_response(text: str | None) -> CurationParseResult:
    """
    Parse the model's reply into CurationCopy.

    Accepts the object bare or inside code fences, surrounded by chatter,
    wrapped in a one-element list, or nested one level under a single key.
    Key matching is case-insensitive. Every field must be a non-blank string.
    """
    if not text or not text.strip():
        return CurationParseResult(error="empty response")

    cleaned = _FENCE_RE.sub("", text).strip()
    data = _load_json(cleaned)
    if data is None:
        return CurationParseResult(error="response is not valid JSON")

    if isinstance(data, list):
        data = next((item for item in data if isinstance(item, dict)), None)
    if not isinstance(data, dict):
        return CurationParseResult(error="response is not a JSON object")

    fields = {str(k).strip().lower(): v for k, v in data.items()}
    if "headline" not in fields:
        nested = [v for v in data.values() if isinstance(v, dict)]
        if len(nested) == 1:
            fields = {str(k).strip().lower(): v for k, v in nested[0].items()}

    values = {}
    for name in COPY_FIELDS:
        value = fields.get(name)
        if not isinstance(value, str) or not value.strip():
            return CurationParseResult(error=f"missing field: {name}")
        values[name] = value.strip()

    return CurationParseResult(copy=CurationCopy(**values))


def _load_json(text: str):
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Chatter around the object: try the outermost braces
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError:
        return None


class Curator:
    """Builds CuratedContent for an article from an LLM and an image search."""

    SYSTEM_PROMPT = (
        'You are a content curator for "Phase Loop Records," focused on deep, '
        "technical electronic/rock music news."
    )

    PROMPT_TEMPLATE = """TASK: Synthesize the news based on the title. Generate:
1. HEADLINE (5-7 words, bold, technical style).
2. SHORT DESCRIPTION (max 40 words).
3. SOCIAL MEDIA CAPTION (max 100 words). Include #PhaseLoopRecords and mention source ({source}).
NEWS TITLE: "{title}"

This response MUST be in valid JSON format: {{ "headline": "...", "description": "...", "caption": "..." }}"""

    def __init__(
        self,
        provider: "LLMProvider | None",
        image_search: "GoogleImageSearch | None" = None,
        ai_timeout: float = 60,
        search_timeout: float = 15,
    ):
        self.provider = provider
        self.image_search = image_search
        self.ai_timeout = ai_timeout
        self.search_timeout = search_timeout

    @property
    def ai_enabled(self) -> bool:
        return self.provider is not None

    @property
    def image_search_enabled(self) -> bool:
        return self.image_search is not None and self.image_search.configured

    def build_prompt(self, article: ArticleBrief) -> str:
        return self.PROMPT_TEMPLATE.format(title=article.title, source=article.source)

    async def curate(self, article: ArticleBrief) -> CuratedContent:
        """
        Generate copy and find images for an article.

        The AI call and the image search run concurrently. A failed AI call
        yields placeholder copy; a failed search yields no images.
        """
        images, copy = await asyncio.gather(
            self.search_images(f"{article.title} {article.source}"),
            self._generate_copy_safe(article),
        )

        if copy is None:
            return CuratedContent.placeholder(images, article.source)

        logger.info(f"Generated content for: {article.title}")
        return CuratedContent(
            headline=copy.headline,
            description=copy.description,
            caption=copy.caption,
            images=images,
            original_source=article.source,
        )

    async def generate_copy(self, article: ArticleBrief) -> CurationCopy:
        """
        Ask the provider for copy.

        Raises:
            CurationError: Provider missing, call failed or timed out, or reply unusable
        """
        if self.provider is None:
            raise CurationError("No LLM provider configured")

        try:
            response = await asyncio.wait_for(
                self.provider.generate(
                    self.build_prompt(article),
                    system_prompt=self.SYSTEM_PROMPT,
                    max_tokens=1024,
                    json_mode=True,
                ),
                timeout=self.ai_timeout,
            )
        except asyncio.TimeoutError:
            raise CurationError(f"AI call timed out after {self.ai_timeout}s")
        except Exception as e:
            raise CurationError(f"AI call failed: {e}") from e

        logger.info(
            f"AI copy from {self.provider.name}/{response.model}: "
            f"{response.input_tokens} input, {response.output_tokens} output tokens"
        )
        result = parse_curation_response(response.text)
        if not result.ok:
            raise CurationError(f"Unusable AI response: {result.error}")
        return result.copy

    async def search_images(self, query: str, start: int | None = None) -> list[str]:
        """Image URLs for a query; empty on any failure or when search is not configured."""
        if not self.image_search_enabled:
            logger.debug("Image search not configured, skipping")
            return []

        logger.info(f"Searching images for: {query}")
        try:
            candidates = await asyncio.wait_for(
                self.image_search.search(query, start=start),
                timeout=self.search_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Image search timed out after {self.search_timeout}s")
            return []
        except ImageSearchError as e:
            logger.warning(f"Image search error: {e}")
            return []
        except Exception as e:
            logger.warning(f"Unexpected image search error: {e}")
            return []

        return [candidate.url for candidate in candidates]

    async def _generate_copy_safe(self, article: ArticleBrief) -> CurationCopy | None:
        try:
            return await self.generate_copy(article)
        except CurationError as e:
            logger.warning(f"AI error for '{article.title}': {e}")
            return None
