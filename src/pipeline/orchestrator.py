"""Ingestion pass orchestration."""

import asyncio
import threading
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

import structlog

from ..config.settings import settings
from ..config.source_registry import RegistryError, SourceRegistry
from ..ingestion.fetcher import SourceFetcher
from ..ingestion.interfaces import FetcherInterface, RawItem, Source, SourceFetchError
from ..storage.interfaces import Article, ArticleStoreInterface, PersistenceError, StoreReadError
from ..storage.retention import enforce_capacity, latest_fetch, merge
from ..summarization.interfaces import SummarizerInterface
from ..summarization.summarizer import truncate

logger = structlog.get_logger()

ALREADY_RUNNING_MESSAGE = "Fetch already in progress"

# Shared by every orchestrator in the process: passes over the same store must
# never overlap, whichever entry point started them.
_pass_lock = threading.Lock()


class PassSetupError(Exception):
    """Sources or the existing store could not be loaded before fetching."""


class ConcurrentPassRejected(Exception):
    """A pass was requested while another one is running."""


@dataclass
class FetchResult:
    """Outcome of one ingestion pass."""
    success: bool
    message: str
    new_count: Optional[int] = None
    total_count: Optional[int] = None
    failed_sources: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {"success": self.success, "message": self.message}
        if self.success:
            data.update(
                new_count=self.new_count,
                total_count=self.total_count,
                failed_sources=self.failed_sources,
            )
        return data


class FetchOrchestrator:
    """Runs ingestion passes: fetch, dedup, summarize, merge, evict, persist.

    Only one pass runs at a time in the process, across all orchestrator
    instances. A second request while a pass is running is rejected
    immediately rather than queued. Separate processes (the API server and the
    headless worker) are not coordinated and must not share a store.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        store: ArticleStoreInterface,
        summarizer: SummarizerInterface,
        fetcher: FetcherInterface = None,
        max_articles: int = None,
        summarize_concurrency: int = None,
    ):
        self.registry = registry
        self.store = store
        self.summarizer = summarizer
        self._fetcher = fetcher
        self.max_articles = settings.max_articles if max_articles is None else max_articles
        self.summarize_concurrency = summarize_concurrency or settings.summarize_concurrency

    @property
    def is_running(self) -> bool:
        return _pass_lock.locked()

    @contextmanager
    def _single_flight(self):
        if not _pass_lock.acquire(blocking=False):
            raise ConcurrentPassRejected(ALREADY_RUNNING_MESSAGE)
        try:
            yield
        finally:
            _pass_lock.release()

    async def run(self) -> FetchResult:
        """Run one ingestion pass and report the outcome. Never raises."""
        try:
            with self._single_flight():
                return await self._run_pass()
        except ConcurrentPassRejected:
            logger.info("fetch_rejected", reason="already_running")
            return FetchResult(success=False, message=ALREADY_RUNNING_MESSAGE)
        except Exception as e:
            logger.exception("fetch_failed", error=str(e))
            return FetchResult(success=False, message=f"Fetch failed: {e}")

    async def _run_pass(self) -> FetchResult:
        start = datetime.now(timezone.utc)
        logger.info("fetch_started")

        try:
            sources, existing = await asyncio.to_thread(self._load_snapshot)
        except PassSetupError as e:
            logger.error("fetch_setup_failed", error=str(e))
            return FetchResult(success=False, message=str(e))

        fetched_at = self._pass_timestamp(start, existing)

        async with self._open_fetcher() as fetcher:
            results = await asyncio.gather(
                *(self._fetch_source(fetcher, source) for source in sources)
            )

        failed = [source.name for source, items in zip(sources, results) if items is None]
        pending = self._admit_new(sources, results, existing)

        semaphore = asyncio.Semaphore(self.summarize_concurrency)
        incoming = await asyncio.gather(
            *(self._build_article(semaphore, source, item, fetched_at) for source, item in pending)
        )

        merged, new_count = merge(existing, incoming)
        kept = enforce_capacity(merged, self.max_articles)

        try:
            await asyncio.to_thread(self.store.persist, kept)
        except PersistenceError as e:
            logger.error("fetch_persist_failed", error=str(e))
            return FetchResult(success=False, message=str(e))

        elapsed = (datetime.now(timezone.utc) - start).total_seconds()
        logger.info(
            "fetch_complete",
            sources=len(sources),
            failed_sources=len(failed),
            new=new_count,
            evicted=len(merged) - len(kept),
            total=len(kept),
            elapsed_seconds=round(elapsed, 2),
        )
        return FetchResult(
            success=True,
            message=f"Fetched {new_count} new articles. Total: {len(kept)}",
            new_count=new_count,
            total_count=len(kept),
            failed_sources=failed,
        )

    def _load_snapshot(self) -> Tuple[List[Source], List[Article]]:
        """Read enabled sources and the current articles."""
        try:
            sources = self.registry.enabled_sources()
        except RegistryError as e:
            raise PassSetupError(str(e)) from e
        try:
            existing = self.store.load_all()
        except StoreReadError as e:
            raise PassSetupError(str(e)) from e
        return sources, existing

    def _pass_timestamp(self, start: datetime, existing: List[Article]) -> datetime:
        """One fetch time per pass, strictly after anything already stored."""
        latest = latest_fetch(existing)
        if latest is not None and latest >= start:
            return latest + timedelta(microseconds=1)
        return start

    @asynccontextmanager
    async def _open_fetcher(self):
        if self._fetcher is not None:
            yield self._fetcher
            return
        async with SourceFetcher() as fetcher:
            yield fetcher

    async def _fetch_source(self, fetcher: FetcherInterface, source: Source) -> Optional[List[RawItem]]:
        """Fetch one source. Returns None when the source failed."""
        try:
            return await fetcher.fetch(source)
        except SourceFetchError as e:
            logger.warning("source_skipped", source=source.name, reason="fetch_error",
                           error=str(e.cause))
        except Exception as e:
            logger.exception("source_skipped", source=source.name, reason="unexpected_error",
                             error=str(e))
        return None

    def _admit_new(
        self,
        sources: List[Source],
        results: List[Optional[List[RawItem]]],
        existing: List[Article],
    ) -> List[Tuple[Source, RawItem]]:
        """Pick items whose link is neither stored nor already admitted this pass."""
        seen = {a.link for a in existing}
        pending = []
        for source, items in zip(sources, results):
            for item in items or []:
                if not item.link or item.link in seen:
                    continue
                seen.add(item.link)
                pending.append((source, item))
        return pending

    async def _build_article(
        self,
        semaphore: asyncio.Semaphore,
        source: Source,
        item: RawItem,
        fetched_at: datetime,
    ) -> Article:
        async with semaphore:
            try:
                summary = await self.summarizer.summarize(item.body)
            except Exception as e:
                # A lost summary must never cost the article
                logger.warning("summarization_degraded", link=item.link, error=str(e))
                summary = truncate(item.body, settings.summary_max_chars)
        return Article(
            source_id=source.id,
            source_name=source.name,
            title=item.title,
            link=item.link,
            published_at=item.published_at,
            summary=summary,
            fetched_at=fetched_at,
        )


async def run_fetch(orchestrator: FetchOrchestrator = None) -> FetchResult:
    """Run one pass with the configured registry, store and summarizer."""
    if orchestrator is None:
        from ..storage.factory import get_article_store, get_source_registry
        from ..summarization.summarizer import get_summarizer

        orchestrator = FetchOrchestrator(
            registry=get_source_registry(),
            store=get_article_store(),
            summarizer=get_summarizer(),
        )
    return await orchestrator.run()
