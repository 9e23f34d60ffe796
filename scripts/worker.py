"""Headless worker that runs ingestion passes on a schedule.

Use this instead of serve.py when the HTTP API is not needed. Run one or the
other against a given data directory, never both: the single-flight guard only
covers passes inside one process.

Usage:
    python scripts/worker.py

Environment Variables:
    NEWSFEED_FETCH_INTERVAL_MINUTES: minutes between passes (default 60, 0 disables)
    NEWSFEED_FETCH_ON_STARTUP: run a pass right after start (default true)
    NEWSFEED_ARTICLE_STORE_URL: optional database URL for the article store
    NEWSFEED_LLM_PROVIDER / NEWSFEED_<PROVIDER>_API_KEY: LLM summaries
    NEWSFEED_ALERT_WEBHOOK_URL: optional webhook for failure alerts
"""

import asyncio
import signal
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from src.config.logging_setup import configure_logging
from src.pipeline.orchestrator import FetchOrchestrator
from src.pipeline.scheduling import schedule_fetches
from src.storage.factory import get_article_store, get_source_registry
from src.summarization.summarizer import get_summarizer

logger = structlog.get_logger()


class FetchWorker:
    """Runs the scheduled fetch jobs until stopped."""

    def __init__(self):
        self.orchestrator = FetchOrchestrator(
            registry=get_source_registry(),
            store=get_article_store(),
            summarizer=get_summarizer(),
        )
        self.scheduler = AsyncIOScheduler()
        self.stopped = asyncio.Event()

    def start(self) -> bool:
        """Start the worker. Returns False when there is nothing to schedule."""
        jobs = schedule_fetches(self.scheduler, self.orchestrator)
        if not jobs:
            logger.warning("worker_idle", reason="startup and interval fetches are both disabled")
            return False
        self.scheduler.start()
        logger.info("worker_started", jobs=jobs)
        return True

    def stop(self):
        """Stop the worker gracefully."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        self.stopped.set()
        logger.info("worker_stopped")


async def main():
    """Main entry point."""
    configure_logging()
    worker = FetchWorker()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, worker.stop)

    if not worker.start():
        return 1
    await worker.stopped.wait()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
