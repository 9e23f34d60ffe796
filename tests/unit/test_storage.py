"""Unit tests for storage module."""

import json
import os

import pytest

from src.storage.interfaces import Article, PersistenceError
from src.storage.json_store import JsonArticleStore
from src.storage.database import SqlArticleStore
from src.storage.factory import is_database_url


class TestJsonArticleStore:
    """Tests for JsonArticleStore."""

    def test_missing_file_is_empty(self, tmp_path):
        store = JsonArticleStore(tmp_path / "nope" / "articles.json")
        assert store.load_all() == []

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "articles.json"
        path.write_text("{not json")
        assert JsonArticleStore(path).load_all() == []

    def test_non_list_document_is_empty(self, tmp_path):
        path = tmp_path / "articles.json"
        path.write_text('{"articles": []}')
        assert JsonArticleStore(path).load_all() == []

    def test_malformed_records_skipped(self, tmp_path):
        path = tmp_path / "articles.json"
        path.write_text(json.dumps([
            {"title": "no link", "fetched_at": "2024-01-01T00:00:00+00:00"},
            {"link": "https://x/bad-time", "fetched_at": "yesterday"},
            "not a record",
            {"link": "https://x/ok", "fetched_at": "2024-01-01T00:00:00+00:00"},
        ]))

        articles = JsonArticleStore(path).load_all()

        assert [a.link for a in articles] == ["https://x/ok"]

    def test_persist_and_load_preserves_order(self, article_store, make_article, at):
        articles = [
            make_article("https://x/2", fetched=20, published=5),
            make_article("https://x/1", fetched=10),
        ]

        article_store.persist(articles)
        loaded = article_store.load_all()

        assert [a.link for a in loaded] == ["https://x/2", "https://x/1"]
        assert loaded[0].fetched_at == at(20)
        assert loaded[0].published_at == at(5)
        assert loaded[1].published_at is None

    def test_persist_leaves_no_temp_files(self, tmp_path, make_article):
        store = JsonArticleStore(tmp_path / "articles.json")
        store.persist([make_article("https://x/1")])
        assert os.listdir(tmp_path) == ["articles.json"]

    def test_failed_persist_keeps_previous_state(self, tmp_path, make_article, monkeypatch):
        path = tmp_path / "articles.json"
        store = JsonArticleStore(path)
        store.persist([make_article("https://x/1")])
        before = path.read_text()

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("src.storage.json_store.os.replace", broken_replace)

        with pytest.raises(PersistenceError):
            store.persist([make_article("https://x/2")])

        assert path.read_text() == before
        assert os.listdir(tmp_path) == ["articles.json"]

    def test_unwritable_location_raises_persistence_error(self, tmp_path, make_article):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = JsonArticleStore(blocker / "articles.json")

        with pytest.raises(PersistenceError):
            store.persist([make_article("https://x/1")])

    def test_legacy_camel_case_records(self, tmp_path):
        path = tmp_path / "articles.json"
        path.write_text(json.dumps([{
            "sourceId": 1712345678901,
            "sourceName": "Legacy",
            "title": "Old format",
            "link": "https://x/legacy",
            "published_at": "Mon, 01 Jan 2024 10:00:00 GMT",
            "summary": "",
            "fetched_at": "2024-01-02T00:00:00.000Z",
        }]))

        [article] = JsonArticleStore(path).load_all()

        assert article.source_id == "1712345678901"
        assert article.source_name == "Legacy"
        assert article.published_at.year == 2024
        assert article.fetched_at.tzinfo is not None

    def test_feed_sorted_newest_published_first(self, article_store, make_article):
        article_store.persist([
            make_article("https://x/undated", fetched=30),
            make_article("https://x/old", fetched=20, published=100),
            make_article("https://x/new", fetched=10, published=200),
        ])

        feed = article_store.feed()

        assert [a.link for a in feed] == ["https://x/new", "https://x/old", "https://x/undated"]


class TestSqlArticleStore:
    """Tests for SqlArticleStore on SQLite."""

    def test_empty_database(self, temp_db):
        assert SqlArticleStore(temp_db).load_all() == []

    def test_persist_and_load(self, temp_db, make_article, at):
        store = SqlArticleStore(temp_db)
        store.persist([
            make_article("https://x/b", fetched=20, published=7),
            make_article("https://x/a", fetched=10),
        ])

        loaded = store.load_all()

        assert [a.link for a in loaded] == ["https://x/b", "https://x/a"]
        assert loaded[0].fetched_at == at(20)
        assert loaded[0].published_at == at(7)
        assert loaded[1].published_at is None

    def test_persist_replaces_previous_collection(self, temp_db, make_article):
        store = SqlArticleStore(temp_db)
        store.persist([make_article("https://x/1"), make_article("https://x/2")])
        store.persist([make_article("https://x/2"), make_article("https://x/3")])

        assert [a.link for a in store.load_all()] == ["https://x/2", "https://x/3"]

    def test_failed_persist_rolls_back(self, temp_db, make_article):
        store = SqlArticleStore(temp_db)
        store.persist([make_article("https://x/1")])

        # Duplicate links violate the unique constraint
        with pytest.raises(PersistenceError):
            store.persist([make_article("https://x/2"), make_article("https://x/2")])

        assert [a.link for a in store.load_all()] == ["https://x/1"]


def test_is_database_url():
    assert is_database_url("sqlite:///data/articles.db")
    assert is_database_url("postgresql://user@host/db")
    assert not is_database_url("data/articles.json")
    assert not is_database_url(None)


def test_article_round_trips_through_dict(make_article):
    article = make_article("https://x/1", fetched=3, published=2)
    assert Article.from_dict(article.to_dict()) == article
