"""SQLAlchemy models for the article database."""

from sqlalchemy import create_engine, Column, Integer, String, Text, DateTime, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ArticleModel(Base):
    """Database model for stored articles. `id` preserves storage order."""
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Source identification (no foreign key: sources may be deleted)
    source_id = Column(String(64), nullable=False)
    source_name = Column(String(255), nullable=False)

    # Content
    title = Column(Text)
    link = Column(String(2048), unique=True, nullable=False)
    summary = Column(Text)

    # Timestamps
    published_at = Column(DateTime(timezone=True))
    fetched_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_articles_published', 'published_at'),
        Index('idx_articles_fetched', 'fetched_at'),
    )


def init_db(database_url: str):
    """Initialize database and create tables."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return engine
