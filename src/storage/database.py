"""Database-backed article store."""

from pathlib import Path
from typing import List

from sqlalchemy.orm import sessionmaker
from sqlalchemy.exc import SQLAlchemyError
import structlog

from .models import ArticleModel, init_db
from .interfaces import Article, ArticleStoreInterface, PersistenceError, StoreReadError
from ..ingestion.parsers import to_utc

logger = structlog.get_logger()


class SqlArticleStore(ArticleStoreInterface):
    """SQLite/PostgreSQL storage for articles.

    `persist` replaces the whole table inside one transaction, so readers see
    either the previous collection or the new one.
    """

    def __init__(self, database_url: str):
        # Ensure data directory exists
        if database_url.startswith("sqlite:///"):
            db_path = database_url.replace("sqlite:///", "")
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        # SQLAlchemy only knows the postgresql:// scheme
        if database_url.startswith("postgres://"):
            database_url = "postgresql://" + database_url[len("postgres://"):]

        self.engine = init_db(database_url)
        self.Session = sessionmaker(bind=self.engine)

    def load_all(self) -> List[Article]:
        session = self.Session()
        try:
            models = session.query(ArticleModel).order_by(ArticleModel.id).all()
            return [self._model_to_article(m) for m in models]
        except SQLAlchemyError as e:
            logger.error("article_store_read_failed", error=str(e))
            raise StoreReadError(f"Failed to read articles: {e}") from e
        finally:
            session.close()

    def persist(self, articles: List[Article]) -> None:
        session = self.Session()
        try:
            session.query(ArticleModel).delete()
            session.add_all([self._article_to_model(a) for a in articles])
            session.commit()
            logger.debug("article_store_saved", count=len(articles))
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("article_store_persist_failed", error=str(e))
            raise PersistenceError(f"Failed to write articles: {e}") from e
        finally:
            session.close()

    def _article_to_model(self, article: Article) -> ArticleModel:
        return ArticleModel(
            source_id=article.source_id,
            source_name=article.source_name,
            title=article.title,
            link=article.link,
            summary=article.summary,
            published_at=article.published_at,
            fetched_at=article.fetched_at,
        )

    def _model_to_article(self, model: ArticleModel) -> Article:
        # SQLite drops tzinfo on the way back
        return Article(
            source_id=model.source_id,
            source_name=model.source_name,
            title=model.title or "",
            link=model.link,
            published_at=to_utc(model.published_at) if model.published_at else None,
            summary=model.summary or "",
            fetched_at=to_utc(model.fetched_at),
        )
