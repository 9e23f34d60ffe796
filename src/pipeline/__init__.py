"""Pipeline orchestration - ingestion passes."""

from .alerts import send_alert
from .orchestrator import (
    FetchOrchestrator, FetchResult, PassSetupError, ConcurrentPassRejected,
    ALREADY_RUNNING_MESSAGE, run_fetch
)
from .scheduling import run_scheduled_pass, schedule_fetches

__all__ = [
    "FetchOrchestrator", "FetchResult", "PassSetupError", "ConcurrentPassRejected",
    "ALREADY_RUNNING_MESSAGE", "run_fetch", "send_alert",
    "run_scheduled_pass", "schedule_fetches"
]
