"""Pure functions for dedup, capacity eviction, and feed ordering."""

from datetime import datetime, timezone
from typing import Iterable, List, Tuple

from .interfaces import Article

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def merge(existing: List[Article], incoming: Iterable[Article]) -> Tuple[List[Article], int]:
    """Append incoming articles whose link is not already present.

    Returns the merged list and how many incoming articles were added.
    Duplicates within `incoming` are dropped too, first one wins.
    """
    merged = list(existing)
    seen = {a.link for a in merged}
    new_count = 0

    for article in incoming:
        if article.link in seen:
            continue
        seen.add(article.link)
        merged.append(article)
        new_count += 1

    return merged, new_count


def enforce_capacity(articles: List[Article], max_articles: int) -> List[Article]:
    """Keep the `max_articles` most recently fetched articles.

    Within the same fetch time, earlier entries are kept first.
    """
    if max_articles < 0:
        raise ValueError("max_articles must be >= 0")
    if len(articles) <= max_articles:
        return list(articles)

    # sorted() is stable, so equal timestamps keep their relative order
    newest_first = sorted(articles, key=lambda a: a.fetched_at, reverse=True)
    return newest_first[:max_articles]


def sort_by_published(articles: List[Article]) -> List[Article]:
    """Newest published first. Articles without a date sort as oldest."""
    return sorted(articles, key=lambda a: a.published_at or _OLDEST, reverse=True)


def latest_fetch(articles: List[Article]):
    """Most recent fetched_at in the collection, or None when empty."""
    return max((a.fetched_at for a in articles), default=None)
