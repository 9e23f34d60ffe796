"""Interface definitions for data ingestion."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List
from enum import Enum


class SourceType(Enum):
    """Kinds of sources the fetcher knows how to parse."""
    RSS = "rss"      # RSS / Atom syndication
    JSON = "json"    # JSON Feed (https://jsonfeed.org)


@dataclass(frozen=True)
class Source:
    """A configured feed source."""
    id: str
    name: str
    url: str
    source_type: SourceType
    enabled: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "source_type": self.source_type.value,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Source":
        """Build from a persisted record. Accepts the legacy `type` key."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            url=data["url"],
            source_type=SourceType(data.get("source_type") or data["type"]),
            enabled=bool(data.get("enabled", True)),
        )


@dataclass
class RawItem:
    """An item produced by a fetch adapter, before summarization."""
    title: str
    link: str
    published_at: Optional[datetime] = None
    body: str = ""


class SourceFetchError(Exception):
    """A single source could not be fetched or parsed."""

    def __init__(self, source_id: str, source_name: str, cause: Exception):
        self.source_id = source_id
        self.source_name = source_name
        self.cause = cause
        super().__init__(f"{source_name} ({source_id}): {cause}")


class FetcherInterface:
    """Interface for per-source fetching."""

    async def fetch(self, source: Source) -> List[RawItem]:
        """Fetch raw items from one source. Raises SourceFetchError."""
        raise NotImplementedError
