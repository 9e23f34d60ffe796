"""Interface definitions for article storage."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ..ingestion.parsers import parse_timestamp


class StoreReadError(Exception):
    """The article store could not be read at all (not merely empty or corrupt)."""


class PersistenceError(Exception):
    """Writing the article store failed. The previous state is left intact."""


@dataclass(frozen=True)
class Article:
    """An ingested, summarized article. `link` is the identity key."""
    source_id: str
    source_name: str
    title: str
    link: str
    published_at: Optional[datetime]
    summary: str
    fetched_at: datetime

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "source_id": self.source_id,
            "source_name": self.source_name,
            "title": self.title,
            "link": self.link,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "summary": self.summary,
            "fetched_at": self.fetched_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Article":
        """Build from a persisted record. Accepts legacy camelCase keys.

        Raises ValueError when the record has no link or no usable fetch time.
        """
        link = data.get("link")
        if not link:
            raise ValueError("article record has no link")
        fetched_at = parse_timestamp(data.get("fetched_at"))
        if fetched_at is None:
            raise ValueError(f"article record has no valid fetched_at: {link}")

        source_id = data.get("source_id", data.get("sourceId"))
        return cls(
            source_id=str(source_id) if source_id is not None else "",
            source_name=data.get("source_name", data.get("sourceName")) or "",
            title=data.get("title") or "",
            link=link,
            published_at=parse_timestamp(data.get("published_at")),
            summary=data.get("summary") or "",
            fetched_at=fetched_at,
        )


class ArticleStoreInterface:
    """Interface for the persisted article collection."""

    def load_all(self) -> List[Article]:
        """Load every stored article in storage order.

        Missing or corrupt state is an empty store. Raises StoreReadError only
        when the backend itself is unreachable.
        """
        raise NotImplementedError

    def persist(self, articles: List[Article]) -> None:
        """Atomically replace the stored collection. Raises PersistenceError."""
        raise NotImplementedError

    def feed(self) -> List[Article]:
        """Articles newest-published first, for read access."""
        from .retention import sort_by_published
        return sort_by_published(self.load_all())
