"""Webhook alerts for failed ingestion passes."""

import httpx
import structlog

from ..config.settings import settings

logger = structlog.get_logger()

EMOJI = {
    "info": "ℹ️",
    "warning": "⚠️",
    "error": "🚨",
}


async def send_alert(message: str, level: str = "warning", webhook_url: str = None) -> bool:
    """Post a message to the alert webhook (if configured).

    Returns True when the webhook accepted the message. Delivery problems are
    logged and never raised, so alerting cannot break a pass.
    """
    webhook_url = webhook_url or settings.alert_webhook_url
    if not webhook_url:
        return False

    text = f"{EMOJI.get(level, '📢')} *Newsfeed*\n{message}"
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.post(webhook_url, json={"text": text})
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error("alert_failed", error=str(e))
        return False

    logger.debug("alert_sent", level=level)
    return True
