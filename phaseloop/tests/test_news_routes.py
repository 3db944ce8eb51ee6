"""
Tests for news routes: article list and manual refresh.
"""

import sqlite3
from unittest.mock import patch


class TestListNews:
    """Tests for GET /api/news."""

    def test_empty_store(self, client):
        response = client.get("/api/news")
        assert response.status_code == 200
        assert response.json() == []

    def test_newest_first_with_camel_case_fields(self, client_with_data):
        client, _ = client_with_data
        articles = client.get("/api/news").json()

        assert [a["title"] for a in articles] == ["Newer Story", "Older Story"]
        newest = articles[0]
        assert newest["source"] == "Other Feed"
        assert newest["link"] == "https://news.example.com/newer"
        assert newest["originalImageUrl"] == "https://img.example.com/newer.jpg"
        assert newest["pubDate"].startswith("2024-04-02T09:00:00")
        assert "fetchedAt" in newest
        assert articles[1]["originalImageUrl"] is None

    def test_store_failure_returns_500(self, client, test_db):
        with patch.object(test_db, "get_all_articles", side_effect=sqlite3.OperationalError("disk I/O error")):
            response = client.get("/api/news")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to retrieve articles."


class TestGetArticle:

    def test_found(self, client_with_data):
        client, _ = client_with_data
        response = client.get("/api/news/article", params={"link": "https://news.example.com/older"})
        assert response.status_code == 200
        assert response.json()["title"] == "Older Story"

    def test_not_found(self, client):
        response = client.get("/api/news/article", params={"link": "https://nope.example.com"})
        assert response.status_code == 404


class TestRefresh:
    """Tests for POST /api/news/refresh."""

    def test_starts_background_run(self, client, context):
        with patch.object(context.scheduler, "run_now") as run_now:
            response = client.post("/api/news/refresh")

        assert response.status_code == 200
        assert response.json() == {"started": True, "message": "Ingestion started"}
        run_now.assert_called_once()

    def test_skipped_while_running(self, client, context):
        with patch.object(type(context.scheduler), "is_running", new=True):
            response = client.post("/api/news/refresh")

        assert response.json()["started"] is False
