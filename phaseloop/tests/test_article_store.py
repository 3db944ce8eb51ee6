"""
Tests for the article store: upsert by link and ordered reads.
"""

import time
from datetime import datetime, timezone

import pytest

from phaseloop.database import Database
from phaseloop.exceptions import StoreConnectionError

from .factories import make_entry


class TestUpsert:

    def test_insert_new_articles(self, test_db):
        result = test_db.upsert_articles([
            make_entry("https://news.example.com/1", image="https://img.example.com/1.jpg"),
            make_entry("https://news.example.com/2"),
        ])

        assert (result.inserted, result.updated, result.failed) == (2, 0, 0)
        assert test_db.count_articles() == 2
        stored = test_db.get_article_by_link("https://news.example.com/1")
        assert stored.original_image_url == "https://img.example.com/1.jpg"
        assert stored.source == "Test Feed"

    def test_same_link_twice_leaves_one_row_with_latest_fields(self, test_db):
        link = "https://news.example.com/story"
        test_db.upsert_articles([make_entry(link, title="First title")])
        first = test_db.get_article_by_link(link)

        time.sleep(0.01)
        result = test_db.upsert_articles([
            make_entry(link, title="Second title", image="https://img.example.com/new.jpg")
        ])
        second = test_db.get_article_by_link(link)

        assert (result.inserted, result.updated) == (0, 1)
        assert test_db.count_articles() == 1
        assert second.title == "Second title"
        assert second.original_image_url == "https://img.example.com/new.jpg"
        assert second.id == first.id
        assert second.created_at == first.created_at
        assert second.fetched_at > first.fetched_at

    def test_empty_batch_writes_nothing(self, test_db):
        result = test_db.upsert_articles([])
        assert result.written == 0
        assert test_db.count_articles() == 0

    def test_bad_row_is_counted_and_others_are_kept(self, test_db):
        bad = make_entry("https://news.example.com/bad")
        bad.title = None  # violates NOT NULL

        result = test_db.upsert_articles([
            make_entry("https://news.example.com/good-1"),
            bad,
            make_entry("https://news.example.com/good-2"),
        ])

        assert result.inserted == 2
        assert result.failed == 1
        assert test_db.get_article_by_link("https://news.example.com/bad") is None
        assert test_db.count_articles() == 2


class TestReads:

    def test_get_all_orders_by_pub_date_desc(self, test_db):
        test_db.upsert_articles([
            make_entry("https://news.example.com/mid", pub_date=datetime(2024, 3, 2, tzinfo=timezone.utc)),
            make_entry("https://news.example.com/new", pub_date=datetime(2024, 3, 3, tzinfo=timezone.utc)),
            make_entry("https://news.example.com/old", pub_date=datetime(2023, 12, 31, tzinfo=timezone.utc)),
        ])

        links = [a.link for a in test_db.get_all_articles()]
        assert links == [
            "https://news.example.com/new",
            "https://news.example.com/mid",
            "https://news.example.com/old",
        ]

    def test_equal_pub_dates_prefer_latest_fetch(self, test_db):
        same = datetime(2024, 3, 2, tzinfo=timezone.utc)
        test_db.upsert_articles([make_entry("https://news.example.com/a", pub_date=same)])
        time.sleep(0.01)
        test_db.upsert_articles([make_entry("https://news.example.com/b", pub_date=same)])

        assert [a.link for a in test_db.get_all_articles()][0] == "https://news.example.com/b"

    def test_timestamps_round_trip_as_aware_utc(self, test_db):
        test_db.upsert_articles([make_entry("https://news.example.com/x")])
        article = test_db.get_article_by_link("https://news.example.com/x")

        assert article.pub_date == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        assert article.fetched_at.tzinfo is not None

    def test_unknown_link(self, test_db):
        assert test_db.get_article_by_link("https://nope.example.com") is None


def test_unopenable_store_raises(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")

    with pytest.raises(StoreConnectionError):
        Database(blocker / "articles.db")
