"""
Ingestion reconciler - merge per-feed entries into one write batch.
"""

from typing import Iterable

from .feeds import FeedEntry


def reconcile(per_feed: Iterable[list[FeedEntry]]) -> list[FeedEntry]:
    """
    Merge per-feed entry lists into one batch, newest first.

    The sort is global across feeds. Entries with equal publish times keep
    discovery order: configured feed order first, then position within the
    feed. A link seen twice in one batch keeps only its first occurrence in
    the sorted result; matching against earlier runs is left to the store's
    upsert.
    """
    discovered: list[tuple[int, FeedEntry]] = []
    for entries in per_feed:
        for entry in entries:
            discovered.append((len(discovered), entry))

    discovered.sort(key=lambda item: (-item[1].pub_date.timestamp(), item[0]))

    batch: list[FeedEntry] = []
    seen_links: set[str] = set()
    for _, entry in discovered:
        if entry.link in seen_links:
            continue
        seen_links.add(entry.link)
        batch.append(entry)

    return batch
