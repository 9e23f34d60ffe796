"""Article storage - JSON file and database backends."""

from .interfaces import Article, ArticleStoreInterface, PersistenceError, StoreReadError
from .retention import merge, enforce_capacity, sort_by_published
from .json_store import JsonArticleStore
from .database import SqlArticleStore
from .factory import get_article_store, get_source_registry

__all__ = [
    "Article", "ArticleStoreInterface", "PersistenceError", "StoreReadError",
    "merge", "enforce_capacity", "sort_by_published",
    "JsonArticleStore", "SqlArticleStore",
    "get_article_store", "get_source_registry"
]
