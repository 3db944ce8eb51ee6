"""
Ingestion pipeline: fetch every configured feed, reconcile, and store.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from .exceptions import FeedFetchError
from .reconciler import reconcile

if TYPE_CHECKING:
    from .database import Database, UpsertResult
    from .feeds import FeedDescriptor, FeedEntry, FeedParser

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    """Summary of one ingestion cycle."""
    started_at: datetime
    entries: list["FeedEntry"] = field(default_factory=list)
    failed_feeds: list[str] = field(default_factory=list)
    upsert: "UpsertResult | None" = None

    @property
    def processed(self) -> int:
        return len(self.entries)


class IngestionPipeline:
    """Runs Feed Fetcher -> Reconciler -> Article Store for the configured feeds."""

    def __init__(
        self,
        feed_parser: "FeedParser",
        db: "Database",
        feeds: list["FeedDescriptor"],
    ):
        self.feed_parser = feed_parser
        self.db = db
        self.feeds = feeds

    async def run(self) -> IngestionResult:
        """
        Run one ingestion cycle.

        Feeds are fetched concurrently; a failing feed contributes no entries
        and never aborts the others. An empty batch skips the store write.
        """
        result = IngestionResult(started_at=datetime.now(timezone.utc))
        logger.info(f"Starting news fetch for {len(self.feeds)} feeds")

        per_feed = await asyncio.gather(*(self._fetch_one(feed, result) for feed in self.feeds))
        result.entries = reconcile(per_feed)

        if result.entries:
            result.upsert = self.db.upsert_articles(result.entries)
            logger.info(
                f"Stored {result.upsert.written} articles "
                f"({result.upsert.inserted} new, {result.upsert.updated} updated, "
                f"{result.upsert.failed} failed)"
            )
        else:
            logger.info("No entries collected, skipping store write")

        logger.info(
            f"News fetch complete: {result.processed} items processed, "
            f"{len(result.failed_feeds)} feeds failed"
        )
        return result

    async def _fetch_one(self, feed: "FeedDescriptor", result: IngestionResult) -> list["FeedEntry"]:
        """Fetch one feed, recording the failure and returning no entries on error."""
        try:
            return await self.feed_parser.fetch(feed)
        except FeedFetchError as e:
            logger.warning(f"Failed to fetch feed for {feed.name}: {e.reason}")
        except Exception as e:
            logger.warning(f"Unexpected error fetching feed {feed.name}: {e}")
        result.failed_feeds.append(feed.name)
        return []
