"""Article summarization - LLM-backed with a deterministic fallback."""

from .interfaces import SummarizerInterface, SummarizationDegraded
from .summarizer import TruncatingSummarizer, LLMSummarizer, get_summarizer, truncate
from .llm_client import LLMClient

__all__ = [
    "SummarizerInterface", "SummarizationDegraded",
    "TruncatingSummarizer", "LLMSummarizer", "get_summarizer", "truncate",
    "LLMClient"
]
