"""Summarizers: deterministic truncation and LLM-backed with fallback."""

import asyncio
import re

import structlog

from .interfaces import SummarizerInterface, SummarizationDegraded
from .llm_client import LLMClient
from ..config.settings import settings

logger = structlog.get_logger()

_WS_RE = re.compile(r"\s+")


def truncate(text: str, max_chars: int) -> str:
    """Collapse whitespace and cut on a word boundary, adding an ellipsis."""
    text = _WS_RE.sub(" ", text or "").strip()
    if len(text) <= max_chars:
        return text

    cut = text[:max_chars]
    mid_word = not cut.endswith(" ") and text[max_chars] != " "
    if mid_word:
        space = cut.rfind(" ")
        if space > max_chars // 2:
            cut = cut[:space]
    return cut.rstrip(" ,;:.-") + "..."


class TruncatingSummarizer(SummarizerInterface):
    """Uses the leading part of the body as the summary."""

    def __init__(self, max_chars: int = None):
        self.max_chars = max_chars or settings.summary_max_chars

    async def summarize(self, text: str) -> str:
        return truncate(text, self.max_chars)


class LLMSummarizer(SummarizerInterface):
    """Summarizes with an LLM and falls back to truncation on any failure."""

    def __init__(
        self,
        llm_client: LLMClient = None,
        max_chars: int = None,
        timeout_seconds: float = None,
    ):
        self.llm_client = llm_client or LLMClient()
        self.max_chars = max_chars or settings.summary_max_chars
        self.timeout_seconds = timeout_seconds or settings.summarize_timeout_seconds
        self.fallback = TruncatingSummarizer(self.max_chars)

    async def summarize(self, text: str) -> str:
        text = (text or "").strip()
        if not text:
            return ""

        try:
            return await self._summarize_llm(text)
        except SummarizationDegraded as e:
            logger.warning("summarization_degraded", error=str(e), chars=len(text))
            return await self.fallback.summarize(text)

    async def _summarize_llm(self, text: str) -> str:
        try:
            reply = await asyncio.wait_for(
                self.llm_client.summarize(text, self.max_chars),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise SummarizationDegraded(f"timed out after {self.timeout_seconds}s") from e
        except Exception as e:
            raise SummarizationDegraded(str(e) or type(e).__name__) from e

        summary = _WS_RE.sub(" ", reply or "").strip()
        if not summary:
            raise SummarizationDegraded("empty reply")
        return truncate(summary, self.max_chars)


def get_summarizer() -> SummarizerInterface:
    """Pick the LLM summarizer when a provider and key are configured."""
    if settings.llm_provider != "none" and settings.llm_api_key():
        logger.info("using_llm_summarizer", provider=settings.llm_provider, model=settings.llm_model)
        return LLMSummarizer()

    logger.info("using_truncating_summarizer", max_chars=settings.summary_max_chars)
    return TruncatingSummarizer()
