"""
Pytest fixtures for backend tests.
"""

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from phaseloop.config import AppContext, config
from phaseloop.curation import Curator
from phaseloop.database import Database
from phaseloop.feeds import FeedParser
from phaseloop.ingestion import IngestionPipeline
from phaseloop.preview import PreviewRenderer
from phaseloop.rate_limit import limiter
from phaseloop.scheduler import IngestionScheduler
from phaseloop.server import create_app

from .factories import FakeImageSearch, MockProvider, make_entry


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        yield Path(f.name)
    # Cleanup
    if os.path.exists(f.name):
        os.unlink(f.name)


@pytest.fixture
def public_dir():
    """Temporary public directory for rendered previews."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def test_db(temp_db_path):
    """Create a test database instance."""
    yield Database(temp_db_path)


@pytest.fixture
def mock_provider():
    return MockProvider()


@pytest.fixture
def image_search():
    return FakeImageSearch(urls=[
        "https://img.example.com/1.jpg",
        "https://img.example.com/2.jpg",
        "https://img.example.com/3.jpg",
    ])


@pytest.fixture
def context(test_db, mock_provider, image_search, public_dir):
    """Application context with network collaborators replaced."""
    feed_parser = FeedParser()
    pipeline = IngestionPipeline(feed_parser=feed_parser, db=test_db, feeds=[])
    return AppContext(
        db=test_db,
        feed_parser=feed_parser,
        pipeline=pipeline,
        curator=Curator(provider=mock_provider, image_search=image_search, ai_timeout=5, search_timeout=5),
        preview_renderer=PreviewRenderer(public_dir=public_dir, resolve_dns=False),
        scheduler=IngestionScheduler(pipeline, initial_delay_seconds=0),
    )


@pytest.fixture
def client(context, public_dir, monkeypatch):
    """Create a test client with isolated database and doubles."""
    monkeypatch.setattr(config, "AUTH_API_KEY", "")
    limiter.reset()

    app = create_app(context=context, public_dir=public_dir)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    limiter.reset()


@pytest.fixture
def client_with_data(client, test_db):
    """Test client with a few stored articles."""
    entries = [
        make_entry(
            "https://news.example.com/older",
            title="Older Story",
            pub_date=datetime(2024, 4, 1, 9, 0, tzinfo=timezone.utc),
        ),
        make_entry(
            "https://news.example.com/newer",
            title="Newer Story",
            source="Other Feed",
            pub_date=datetime(2024, 4, 2, 9, 0, tzinfo=timezone.utc),
            image="https://img.example.com/newer.jpg",
        ),
    ]
    test_db.upsert_articles(entries)
    yield client, {"entries": entries}
