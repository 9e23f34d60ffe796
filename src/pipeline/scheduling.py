"""Scheduled ingestion passes, shared by the API server and the headless worker."""

from datetime import datetime, timedelta, timezone
from typing import List

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from ..config.settings import settings
from .alerts import send_alert
from .orchestrator import ALREADY_RUNNING_MESSAGE, FetchOrchestrator, FetchResult

logger = structlog.get_logger()


async def run_scheduled_pass(orchestrator: FetchOrchestrator) -> FetchResult:
    """Run one pass, log the outcome and alert on failures."""
    logger.info("job_started", job="fetch_articles")
    result = await orchestrator.run()

    if result.success:
        logger.info("job_completed", job="fetch_articles",
                    new=result.new_count, total=result.total_count,
                    failed_sources=result.failed_sources)
        if result.failed_sources:
            await send_alert(f"Sources failed: {', '.join(result.failed_sources)}")
    elif result.message == ALREADY_RUNNING_MESSAGE:
        logger.info("job_skipped", job="fetch_articles", reason="already_running")
    else:
        logger.error("job_failed", job="fetch_articles", error=result.message)
        await send_alert(f"Fetch failed: {result.message}", level="error")
    return result


def schedule_fetches(scheduler: AsyncIOScheduler, orchestrator: FetchOrchestrator) -> List[str]:
    """Register the startup pass and the periodic pass. Returns the job ids added.

    NEWSFEED_FETCH_ON_STARTUP=false skips the startup pass and
    NEWSFEED_FETCH_INTERVAL_MINUTES=0 disables the periodic one.
    """
    job_ids = []

    if settings.fetch_on_startup:
        run_at = datetime.now(timezone.utc) + timedelta(seconds=settings.startup_fetch_delay_seconds)
        scheduler.add_job(
            run_scheduled_pass,
            DateTrigger(run_date=run_at),
            args=[orchestrator],
            id="startup_fetch",
            name="Fetch articles on startup",
            replace_existing=True,
        )
        job_ids.append("startup_fetch")

    if settings.fetch_interval_minutes > 0:
        scheduler.add_job(
            run_scheduled_pass,
            IntervalTrigger(minutes=settings.fetch_interval_minutes),
            args=[orchestrator],
            id="interval_fetch",
            name="Fetch articles periodically",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        job_ids.append("interval_fetch")

    return job_ids
