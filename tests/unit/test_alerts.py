"""Unit tests for failure alerts."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from src.pipeline.alerts import send_alert

WEBHOOK = "https://hooks.example.com/services/T000/B000/XXX"


def _response(status: int) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("POST", WEBHOOK))


@pytest.mark.asyncio
class TestSendAlert:
    """Tests for send_alert()."""

    async def test_no_webhook_configured(self, monkeypatch):
        from src.config.settings import settings
        monkeypatch.setattr(settings, "alert_webhook_url", None)

        with patch.object(httpx.AsyncClient, "post", new=AsyncMock()) as post:
            assert await send_alert("ignored") is False

        post.assert_not_awaited()

    async def test_posts_message(self):
        with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=_response(200))) as post:
            sent = await send_alert("Fetch failed: disk full", level="error", webhook_url=WEBHOOK)

        assert sent is True
        args, kwargs = post.call_args
        assert args[0] == WEBHOOK
        assert kwargs["json"]["text"].startswith("🚨 *Newsfeed*")
        assert "disk full" in kwargs["json"]["text"]

    async def test_rejected_by_webhook(self):
        with patch.object(httpx.AsyncClient, "post", new=AsyncMock(return_value=_response(500))):
            assert await send_alert("boom", webhook_url=WEBHOOK) is False

    async def test_network_error_is_not_raised(self):
        error = httpx.ConnectError("refused")
        with patch.object(httpx.AsyncClient, "post", new=AsyncMock(side_effect=error)):
            assert await send_alert("boom", webhook_url=WEBHOOK) is False
