"""Plain-text rendering of the article feed."""

from datetime import datetime, timezone
from typing import List

from ..storage.interfaces import Article
from ..storage.retention import latest_fetch

RULE = "=" * 80
SEPARATOR = "-" * 80


def _format_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def render_plain_text(articles: List[Article], now: datetime = None) -> str:
    """Render articles (already in feed order) as a numbered text listing."""
    now = now or datetime.now(timezone.utc)
    last = latest_fetch(articles)

    lines = [
        "=== NEWS FEED ===",
        "",
        f"Total articles: {len(articles)}",
        f"Last updated: {_format_time(last) if last else 'Never'}",
        f"Generated: {_format_time(now)}",
        "",
        RULE,
        "",
    ]

    if not articles:
        lines.append("No articles yet. Add sources and POST to /api/fetch to load them.")
        return "\n".join(lines) + "\n"

    for i, a in enumerate(articles, 1):
        published = _format_time(a.published_at) if a.published_at else "Unknown date"
        lines.extend([
            f"{i}. {a.title}",
            f"   Source: {a.source_name} | {published}",
            f"   Link: {a.link}",
            f"   {' '.join(a.summary.split())}",
            "",
            SEPARATOR,
            "",
        ])
    return "\n".join(lines)
