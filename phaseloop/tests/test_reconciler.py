"""
Tests for merging per-feed entries into one write batch.
"""

from datetime import datetime, timedelta, timezone

from phaseloop.reconciler import reconcile

from .factories import make_entry

BASE = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def at(hours: int) -> datetime:
    return BASE + timedelta(hours=hours)


def test_sorts_globally_newest_first():
    feed_a = [make_entry("a1", pub_date=at(1)), make_entry("a2", pub_date=at(5))]
    feed_b = [make_entry("b1", pub_date=at(3)), make_entry("b2", pub_date=at(0))]

    batch = reconcile([feed_a, feed_b])

    assert [e.link for e in batch] == ["a2", "b1", "a1", "b2"]


def test_equal_dates_keep_discovery_order():
    feed_a = [make_entry("a1", pub_date=at(0)), make_entry("a2", pub_date=at(0))]
    feed_b = [make_entry("b1", pub_date=at(0))]

    assert [e.link for e in reconcile([feed_a, feed_b])] == ["a1", "a2", "b1"]
    assert [e.link for e in reconcile([feed_b, feed_a])] == ["b1", "a1", "a2"]


def test_mixed_timezones_compare_by_instant():
    plus_two = timezone(timedelta(hours=2))
    feed = [
        make_entry("utc", pub_date=datetime(2024, 5, 1, 11, 0, tzinfo=timezone.utc)),
        make_entry("cest", pub_date=datetime(2024, 5, 1, 12, 30, tzinfo=plus_two)),
    ]
    assert [e.link for e in reconcile([feed])] == ["utc", "cest"]


def test_repeated_link_keeps_newest_occurrence():
    feed_a = [make_entry("shared", title="Old copy", pub_date=at(1))]
    feed_b = [make_entry("shared", title="New copy", pub_date=at(4)), make_entry("b2", pub_date=at(2))]

    batch = reconcile([feed_a, feed_b])

    assert [e.link for e in batch] == ["shared", "b2"]
    assert batch[0].title == "New copy"


def test_empty_input():
    assert reconcile([]) == []
    assert reconcile([[], []]) == []
