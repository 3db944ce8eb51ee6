"""Feed list configuration: built-in defaults or an OPML subscription file."""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from .feeds import FeedDescriptor

logger = logging.getLogger(__name__)

DEFAULT_FEEDS: list[FeedDescriptor] = [
    FeedDescriptor("Pitchfork News", "https://pitchfork.com/rss/news/"),
    FeedDescriptor("Pitchfork Reviews", "https://pitchfork.com/rss/reviews/albums/"),
    FeedDescriptor("Resident Advisor", "https://ra.co/news.rss"),
    FeedDescriptor("The Quietus", "https://thequietus.com/feed"),
    FeedDescriptor("Stereogum", "https://www.stereogum.com/feed/"),
    FeedDescriptor("FACT Magazine", "https://www.factmag.com/feed/"),
    FeedDescriptor("Consequence", "https://consequence.net/feed/"),
]


def parse_opml(xml_content: str) -> list[FeedDescriptor]:
    """
    Extract feed descriptors from OPML XML content.

    Handles both flat and nested (folder) outlines; folders are flattened.
    Outlines without a title fall back to their feed URL as the name.

    Raises:
        ValueError: If XML is invalid or not OPML format
    """
    try:
        root = ET.fromstring(xml_content)
    except ET.ParseError as e:
        raise ValueError(f"Invalid XML: {e}")

    if root.tag.lower() != "opml":
        raise ValueError(f"Not an OPML document (root element: {root.tag})")

    body = root.find("body")
    if body is None:
        raise ValueError("OPML document missing <body> element")

    feeds: list[FeedDescriptor] = []
    seen_urls: set[str] = set()
    for outline in body.iter("outline"):
        url = (outline.get("xmlUrl") or outline.get("xmlurl") or "").strip()
        if not url or url in seen_urls:
            continue
        seen_urls.add(url)
        name = (outline.get("title") or outline.get("text") or "").strip()
        feeds.append(FeedDescriptor(name=name or url, url=url))

    return feeds


def load_feed_list(opml_path: str | Path | None = None) -> list[FeedDescriptor]:
    """
    Return the feeds to ingest.

    An OPML file replaces the built-in list. A missing, unreadable or empty
    file is a configuration error and raises ValueError.
    """
    if not opml_path:
        return list(DEFAULT_FEEDS)

    path = Path(opml_path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"Cannot read feed list {path}: {e}")

    feeds = parse_opml(content)
    if not feeds:
        raise ValueError(f"No feeds found in {path}")

    logger.info(f"Loaded {len(feeds)} feeds from {path}")
    return feeds
