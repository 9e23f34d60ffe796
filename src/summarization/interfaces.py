"""Interface definitions for summarization."""


class SummarizationDegraded(Exception):
    """The summarization backend failed and a fallback summary was used."""


class SummarizerInterface:
    """Interface for reducing article body text to a short summary."""

    async def summarize(self, text: str) -> str:
        """Return a summary for `text`. Must not raise for any input."""
        raise NotImplementedError
