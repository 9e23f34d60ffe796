"""Factory functions to create storage instances.

The article store backend is picked from NEWSFEED_ARTICLE_STORE_URL:
- a SQLAlchemy URL (sqlite://, postgresql://) selects the database store
- unset selects the JSON file at NEWSFEED_ARTICLES_PATH
"""

from functools import lru_cache

import structlog

from ..config.settings import settings
from ..config.source_registry import SourceRegistry
from .interfaces import ArticleStoreInterface

logger = structlog.get_logger()

_SQL_PREFIXES = ("sqlite://", "postgresql://", "postgres://", "postgresql+")


def is_database_url(url: str) -> bool:
    """Check whether a store URL points at a SQL database."""
    return bool(url) and url.startswith(_SQL_PREFIXES)


@lru_cache(maxsize=1)
def get_article_store() -> ArticleStoreInterface:
    """Get the configured article store instance."""
    url = settings.article_store_url

    if is_database_url(url):
        from .database import SqlArticleStore
        logger.info("using_sql_article_store", url=url[:40] + "...")
        return SqlArticleStore(url)

    from .json_store import JsonArticleStore
    logger.info("using_json_article_store", path=str(settings.articles_path))
    return JsonArticleStore(settings.articles_path)


@lru_cache(maxsize=1)
def get_source_registry() -> SourceRegistry:
    """Get the process-wide source registry."""
    return SourceRegistry(settings.sources_path)


def clear_cache():
    """Clear cached instances (useful for testing)."""
    get_article_store.cache_clear()
    get_source_registry.cache_clear()
