"""JSON-file article store with atomic replace."""

import json
import os
import tempfile
from pathlib import Path
from typing import List

import structlog

from .interfaces import Article, ArticleStoreInterface, PersistenceError, StoreReadError
from ..config.settings import settings

logger = structlog.get_logger()


class JsonArticleStore(ArticleStoreInterface):
    """Stores articles as a flat JSON list in a single file."""

    def __init__(self, path: str = None):
        self.path = Path(path) if path else Path(settings.articles_path)

    def load_all(self) -> List[Article]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("article_store_corrupt", path=str(self.path), error=str(e))
            return []
        except OSError as e:
            raise StoreReadError(f"Failed to read articles from {self.path}: {e}") from e

        if not isinstance(data, list):
            logger.warning("article_store_corrupt", path=str(self.path), error="not a JSON list")
            return []

        articles = []
        for record in data:
            try:
                articles.append(Article.from_dict(record))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("article_record_skipped", path=str(self.path), error=str(e))
        return articles

    def persist(self, articles: List[Article]) -> None:
        """Write to a temp file in the same directory, then rename over the target."""
        temp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump([a.to_dict() for a in articles], f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            if temp_path and os.path.exists(temp_path):
                os.unlink(temp_path)
            logger.error("article_store_persist_failed", path=str(self.path), error=str(e))
            raise PersistenceError(f"Failed to write articles to {self.path}: {e}") from e

        logger.debug("article_store_saved", path=str(self.path), count=len(articles))
