"""
Feed Parser - Fetch RSS/Atom feeds and normalize their newest entries.

Handles:
- RSS 2.0 and Atom 1.0 formats (via feedparser)
- Per-feed entry cap
- Best-effort image discovery from enclosures and media:content
- Publish-date fallback to ingestion time
- Rate limiting per domain
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import urlparse

import aiohttp
import feedparser
from bs4 import BeautifulSoup

from .exceptions import FeedFetchError

logger = logging.getLogger(__name__)

DEFAULT_ENTRIES_PER_FEED = 5


@dataclass(frozen=True)
class FeedDescriptor:
    """A configured feed: display name and URL."""
    name: str
    url: str


@dataclass
class FeedEntry:
    """A normalized item from one feed, ready for the article store."""
    source: str
    title: str
    link: str
    pub_date: datetime
    original_image_url: str | None = None


class FeedParser:
    """Fetches feeds and turns their items into FeedEntry records."""

    def __init__(
        self,
        timeout: int = 30,
        max_entries: int = DEFAULT_ENTRIES_PER_FEED,
        user_agent: str | None = None,
    ):
        self.timeout = timeout
        self.max_entries = max_entries
        self.user_agent = user_agent or "PhaseLoopCurator/1.0 (+https://phaseloop.example)"
        self._domain_last_fetch: dict[str, float] = {}
        self._min_interval = 1.0  # Minimum seconds between requests to same domain

    async def fetch(self, descriptor: FeedDescriptor) -> list[FeedEntry]:
        """
        Fetch a feed and return its newest entries.

        Raises:
            FeedFetchError: On network errors, bad status, timeout or unparseable XML
        """
        domain = urlparse(descriptor.url).netloc
        await self._rate_limit(domain)

        headers = {"User-Agent": self.user_agent}

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    descriptor.url,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    resp.raise_for_status()
                    content = await resp.read()
        except asyncio.TimeoutError:
            raise FeedFetchError(descriptor.name, f"timed out after {self.timeout}s")
        except aiohttp.ClientError as e:
            raise FeedFetchError(descriptor.name, str(e) or e.__class__.__name__)

        return self.parse(content, descriptor)

    def parse(self, content: str | bytes, descriptor: FeedDescriptor) -> list[FeedEntry]:
        """
        Parse feed content and normalize up to max_entries items, in upstream order.

        Raw bytes are preferred: feedparser then works out the encoding from
        the XML declaration instead of trusting the HTTP charset.
        """
        parsed = feedparser.parse(content)

        # Check for parse errors
        if parsed.bozo and not parsed.entries:
            raise FeedFetchError(descriptor.name, f"failed to parse feed: {parsed.bozo_exception}")

        fetched_at = datetime.now(timezone.utc)
        entries: list[FeedEntry] = []
        for entry in parsed.entries:
            if len(entries) >= self.max_entries:
                break

            link = (entry.get("link") or "").strip()
            if not link:
                continue

            entries.append(FeedEntry(
                source=descriptor.name,
                title=_clean_title(entry.get("title")),
                link=link,
                pub_date=_resolve_pub_date(entry, fetched_at),
                original_image_url=resolve_image_url(entry),
            ))

        logger.debug(f"Parsed {len(entries)} entries from {descriptor.name}")
        return entries

    async def _rate_limit(self, domain: str):
        """Ensure minimum interval between requests to same domain."""
        now = time.time()
        if domain in self._domain_last_fetch:
            elapsed = now - self._domain_last_fetch[domain]
            if elapsed < self._min_interval:
                self._domain_last_fetch[domain] = now + (self._min_interval - elapsed)
                await asyncio.sleep(self._min_interval - elapsed)
                return
        self._domain_last_fetch[domain] = now


def resolve_image_url(entry) -> str | None:
    """
    Find the entry's original image.

    An image enclosure wins, then media:content; anything else means no image.
    """
    for enclosure in entry.get("enclosures") or []:
        enclosure_type = (enclosure.get("type") or "").lower()
        url = enclosure.get("href") or enclosure.get("url")
        if url and enclosure_type.startswith("image"):
            return url

    for media in entry.get("media_content") or []:
        url = media.get("url")
        if url:
            return url

    return None


def _resolve_pub_date(entry, fallback: datetime) -> datetime:
    """Use the entry's published (or updated) time, else the ingestion time."""
    for key in ("published_parsed", "updated_parsed"):
        value = entry.get(key)
        if value:
            try:
                return datetime(*value[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                continue
    return fallback


def _clean_title(raw: str | None) -> str:
    """Strip markup and surrounding whitespace from a feed title."""
    if not raw:
        return "Untitled"
    text = BeautifulSoup(raw, "html.parser").get_text(" ", strip=True)
    return text or "Untitled"


def parse_feed_sync(
    content: str | bytes,
    descriptor: FeedDescriptor,
    max_entries: int = DEFAULT_ENTRIES_PER_FEED,
) -> list[FeedEntry]:
    """
    Synchronous feed parsing (for use when content is already fetched).

    Useful for testing or when you already have the feed content.
    """
    return FeedParser(max_entries=max_entries).parse(content, descriptor)
