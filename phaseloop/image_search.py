"""
Image search client: candidate images for an article via Google Custom Search.
"""

import logging
from dataclasses import dataclass

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .exceptions import ImageSearchError

logger = logging.getLogger(__name__)

CUSTOM_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"

# The API returns at most 10 results per page
MAX_RESULTS_PER_PAGE = 10


@dataclass
class ImageCandidate:
    """One image search hit."""
    url: str
    width: int | None = None
    height: int | None = None
    context_url: str | None = None


class _RetryableSearchError(Exception):
    """Transient upstream failure (network error or 5xx)."""


class GoogleImageSearch:
    """Google Custom Search JSON API in image mode."""

    def __init__(
        self,
        api_key: str,
        engine_id: str,
        timeout: float = 15,
        num_results: int = 9,
    ):
        self.api_key = api_key
        self.engine_id = engine_id
        self.timeout = timeout
        self.num_results = min(num_results, MAX_RESULTS_PER_PAGE)

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.engine_id)

    async def search(self, query: str, start: int | None = None) -> list[ImageCandidate]:
        """
        Search images for a free-text query.

        Args:
            query: Search terms
            start: Optional 1-based result offset for the next page

        Returns:
            Candidates in ranking order; empty when nothing matched

        Raises:
            ImageSearchError: When the search is not configured or the API fails
        """
        if not self.configured:
            raise ImageSearchError("Google Search CX or API key missing")

        params = {
            "key": self.api_key,
            "cx": self.engine_id,
            "q": query,
            "searchType": "image",
            "num": self.num_results,
            "safe": "active",
        }
        if start:
            params["start"] = start

        try:
            data = await self._get(params)
        except (_RetryableSearchError, httpx.HTTPError, ValueError) as e:
            raise ImageSearchError(f"Image search failed: {e}") from e

        candidates = [_to_candidate(item) for item in data.get("items") or []]
        candidates = [c for c in candidates if c is not None]
        logger.info(f"Image search for '{query}' found {len(candidates)} URLs")
        return candidates

    @retry(
        retry=retry_if_exception_type(_RetryableSearchError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        reraise=True,
    )
    async def _get(self, params: dict) -> dict:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(CUSTOM_SEARCH_URL, params=params)
        except httpx.TransportError as e:
            raise _RetryableSearchError(str(e) or e.__class__.__name__)

        if response.status_code >= 500:
            raise _RetryableSearchError(f"HTTP {response.status_code}")
        if response.status_code != 200:
            try:
                message = response.json().get("error", {}).get("message", "")
            except ValueError:
                message = ""
            raise ImageSearchError(f"HTTP {response.status_code} {message}".strip())

        return response.json()


def _to_candidate(item: dict) -> ImageCandidate | None:
    link = item.get("link")
    if not link:
        return None
    image = item.get("image") or {}
    return ImageCandidate(
        url=link,
        width=image.get("width"),
        height=image.get("height"),
        context_url=image.get("contextLink"),
    )
