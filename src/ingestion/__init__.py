"""Data ingestion - fetching and parsing feed sources."""

from .interfaces import SourceType, Source, RawItem, SourceFetchError, FetcherInterface
from .fetcher import SourceFetcher, PARSERS

__all__ = [
    "SourceType", "Source", "RawItem", "SourceFetchError",
    "FetcherInterface", "SourceFetcher", "PARSERS"
]
