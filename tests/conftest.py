"""Pytest configuration and shared fixtures."""

import pytest
import tempfile
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))


def ts(seconds: int) -> datetime:
    """A fixed UTC timestamp `seconds` after 2024-01-01."""
    return datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=seconds)


@pytest.fixture
def at():
    """Expose `ts` to tests."""
    return ts


@pytest.fixture
def temp_db():
    """Provide a temporary database file."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    yield f"sqlite:///{db_path}"
    # Cleanup
    try:
        os.unlink(db_path)
    except FileNotFoundError:
        pass


@pytest.fixture
def make_article():
    """Factory for Article objects with sensible defaults."""
    from src.storage.interfaces import Article

    def _make(link: str, fetched: int = 0, published: int = None, **overrides) -> Article:
        data = dict(
            source_id="src-1",
            source_name="Test Source",
            title=f"Title for {link}",
            link=link,
            published_at=ts(published) if published is not None else None,
            summary=f"Summary for {link}",
            fetched_at=ts(fetched),
        )
        data.update(overrides)
        return Article(**data)

    return _make


@pytest.fixture
def registry(tmp_path):
    """A source registry backed by a temp file."""
    from src.config.source_registry import SourceRegistry
    return SourceRegistry(tmp_path / "sources.json")


@pytest.fixture
def article_store(tmp_path):
    """A JSON article store backed by a temp file."""
    from src.storage.json_store import JsonArticleStore
    return JsonArticleStore(tmp_path / "articles.json")


class FakeFetcher:
    """Returns canned items per source name; raises for names in `failing`."""

    def __init__(self, items_by_source: dict = None, failing: set = None):
        self.items_by_source = items_by_source or {}
        self.failing = failing or set()
        self.calls = []

    async def fetch(self, source):
        from src.ingestion.interfaces import SourceFetchError
        self.calls.append(source.name)
        if source.name in self.failing:
            raise SourceFetchError(source.id, source.name, ConnectionError("boom"))
        return list(self.items_by_source.get(source.name, []))


@pytest.fixture
def fake_fetcher():
    return FakeFetcher
