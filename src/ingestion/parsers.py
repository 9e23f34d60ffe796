"""Document parsers for each source type, plus text and date helpers."""

import json
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import List, Optional

import feedparser
import structlog
from bs4 import BeautifulSoup

from .interfaces import RawItem

logger = structlog.get_logger()

_WS_RE = re.compile(r"\s+")


class FeedParseError(ValueError):
    """The downloaded document is not a usable feed."""


def clean_text(text: Optional[str]) -> str:
    """Strip markup, unescape entities and collapse whitespace."""
    if not text:
        return ""
    if "<" in text or "&" in text:
        text = BeautifulSoup(text, "html.parser").get_text(" ")
    return _WS_RE.sub(" ", text).strip()


def to_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """Parse ISO-8601 or RFC 822 timestamps. Returns None when unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        return to_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass
    try:
        return to_utc(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError):
        return None


def parse_rss(content: str) -> List[RawItem]:
    """Parse an RSS or Atom document."""
    feed = feedparser.parse(content)

    if feed.bozo and not feed.entries:
        raise FeedParseError(f"Not a valid RSS/Atom feed: {feed.get('bozo_exception')}")

    items = []
    for entry in feed.entries:
        link = entry.get("link")
        if not link:
            continue

        # Prefer full content, fall back to the summary
        body = entry.get("summary", "")
        if entry.get("content"):
            body = entry.content[0].get("value", body)

        published_at = None
        for attr in ("published_parsed", "updated_parsed"):
            parsed = entry.get(attr)
            if parsed:
                try:
                    published_at = datetime(*parsed[:6], tzinfo=timezone.utc)
                    break
                except (TypeError, ValueError):
                    pass

        items.append(RawItem(
            title=clean_text(entry.get("title", "")),
            link=link,
            published_at=published_at,
            body=clean_text(body),
        ))

    return items


def parse_json_feed(content: str) -> List[RawItem]:
    """Parse a JSON Feed document (version 1 or 1.1)."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise FeedParseError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        raise FeedParseError("JSON feed has no items list")

    items = []
    for entry in data["items"]:
        if not isinstance(entry, dict):
            continue
        link = entry.get("url") or entry.get("external_url")
        if not link:
            continue

        body = entry.get("content_text") or entry.get("content_html") or entry.get("summary") or ""

        items.append(RawItem(
            title=clean_text(entry.get("title", "")),
            link=link,
            published_at=parse_timestamp(entry.get("date_published") or entry.get("date_modified")),
            body=clean_text(body),
        ))

    return items
