"""Async source fetcher with per-type parser dispatch, rate limiting, and retries."""

import asyncio
import time
from typing import Callable, Dict, List, Optional

import aiohttp
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential
import structlog

from .interfaces import FetcherInterface, RawItem, Source, SourceFetchError, SourceType
from .parsers import parse_json_feed, parse_rss
from ..config.settings import settings

logger = structlog.get_logger()

PARSERS: Dict[SourceType, Callable[[str], List[RawItem]]] = {
    SourceType.RSS: parse_rss,
    SourceType.JSON: parse_json_feed,
}


class SourceFetcher(FetcherInterface):
    """Downloads a source over HTTP and parses it with the parser for its type.

    At most `max_concurrent` sources are fetched at once. The per-source
    timeout starts when a source gets its slot, so time spent queued behind
    other sources never counts against it.
    """

    def __init__(self, max_concurrent: int = None, source_timeout: float = None):
        self.session: Optional[aiohttp.ClientSession] = None
        self.semaphore = asyncio.Semaphore(max_concurrent or settings.fetch_concurrency)
        self.source_timeout = source_timeout or settings.source_timeout_seconds

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=settings.fetch_timeout_seconds),
            headers={"User-Agent": settings.user_agent}
        )
        return self

    async def __aexit__(self, *args):
        if self.session:
            await self.session.close()

    async def fetch(self, source: Source) -> List[RawItem]:
        """Fetch and parse one source. Any failure becomes SourceFetchError."""
        parser = PARSERS.get(source.source_type)
        if parser is None:
            raise SourceFetchError(
                source.id, source.name,
                ValueError(f"Unsupported source type: {source.source_type}")
            )

        async with self.semaphore:
            start_time = time.time()
            try:
                content = await asyncio.wait_for(
                    self._download(source.url), timeout=self.source_timeout
                )
                items = parser(content)
            except asyncio.TimeoutError as e:
                logger.warning("source_fetch_timeout", source=source.name,
                               timeout_seconds=self.source_timeout)
                raise SourceFetchError(
                    source.id, source.name,
                    TimeoutError(f"no response within {self.source_timeout}s"),
                ) from e
            except Exception as e:
                logger.error("source_fetch_failed", source=source.name, error=str(e))
                raise SourceFetchError(source.id, source.name, e) from e

            logger.info(
                "source_fetched",
                source=source.name,
                source_type=source.source_type.value,
                items=len(items),
                time_ms=int((time.time() - start_time) * 1000)
            )
            return items

    @retry(
        stop=stop_after_attempt(settings.fetch_max_retries),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((aiohttp.ClientError, asyncio.TimeoutError)),
        reraise=True,
    )
    async def _download(self, url: str) -> str:
        """GET the document body. Raises on HTTP errors."""
        if self.session is None:
            raise RuntimeError("SourceFetcher must be used as an async context manager")
        async with self.session.get(url) as response:
            response.raise_for_status()
            return await response.text()
