"""RSS/Atom feed fetcher."""

import calendar
import html
import logging
import re
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

import feedparser
import httpx

from .dates import has_timezone_abbreviation
from .errors import FetchError, ParseError
from .models import FeedItem, ParsedFeed

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
DEFAULT_USER_AGENT = "feedpulse/1.0 (+https://github.com/feedpulse/feedpulse)"
FEED_ACCEPT = (
    "application/rss+xml, application/atom+xml, "
    "application/xml;q=0.9, text/xml;q=0.9, */*;q=0.8"
)

_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


def html_to_text(value: Optional[str]) -> str:
    """Strip tags and entities from an HTML fragment."""
    if not value:
        return ""
    text = html.unescape(_TAG.sub(" ", value))
    return _WHITESPACE.sub(" ", text).strip()


def _struct_to_datetime(value: Any) -> Optional[datetime]:
    """Convert a feedparser UTC time tuple to an aware datetime."""
    if not value:
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc)
    except (OverflowError, OSError, TypeError, ValueError):
        return None


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _first_url(entries: Any, key: str) -> Optional[str]:
    for entry in entries or []:
        url = _clean(entry.get(key)) if hasattr(entry, "get") else None
        if url:
            return url
    return None


def _entry_date(entry: Any, key: str) -> Tuple[Optional[str], Optional[datetime]]:
    """Raw date string and feedparser's parsed instant for ``key``.

    ``updated`` is read without feedparser's deprecated fallback to
    ``published``. The parsed instant is dropped when the raw string ends with
    a zone abbreviation feedparser would silently read as UTC (CET, CEST...).
    """
    raw = _clean(entry[key]) if key in entry else None
    if raw is None or has_timezone_abbreviation(raw):
        return raw, None
    return raw, _struct_to_datetime(entry.get(f"{key}_parsed"))


def entry_to_item(entry: Any, feed_language: Optional[str] = None) -> FeedItem:
    """Map a feedparser entry onto a FeedItem."""
    content_encoded = None
    for block in entry.get("content") or []:
        value = block.get("value")
        if value:
            content_encoded = value
            break

    summary = entry.get("summary") or entry.get("description")

    categories = []
    for tag in entry.get("tags") or []:
        term = _clean(tag.get("term"))
        if term and term not in categories:
            categories.append(term)

    snippet = html_to_text(summary) or None
    pub_date, published_at = _entry_date(entry, "published")
    dc_date, updated_at = _entry_date(entry, "updated")

    return FeedItem(
        title=_clean(html_to_text(entry.get("title"))) if entry.get("title") else None,
        link=_clean(entry.get("link")),
        iso_date=published_at or updated_at,
        dc_date=dc_date,
        pub_date=pub_date,
        content=summary,
        content_encoded=content_encoded,
        content_snippet=snippet,
        media_url=_first_url(entry.get("media_content"), "url"),
        enclosure_url=_first_url(entry.get("enclosures"), "href"),
        creator=_clean(entry.get("author")) or _clean(entry.get("dc_creator")),
        categories=categories,
        language=_clean(entry.get("language")) or feed_language,
    )


def parse_feed(url: str, body: bytes, content_type: Optional[str] = None) -> ParsedFeed:
    """Parse a feed body, raising ParseError when it is not a feed."""
    parsed = feedparser.parse(body)

    if parsed.bozo and not parsed.entries and not parsed.get("version"):
        raise ParseError(
            url,
            f"Invalid feed: {parsed.get('bozo_exception') or 'unrecognized document'}",
            content_type=content_type,
        )
    if not parsed.get("version") and not parsed.entries:
        raise ParseError(url, "Invalid feed: no RSS or Atom content found", content_type=content_type)

    feed = parsed.feed
    language = _clean(feed.get("language"))
    items: List[FeedItem] = [entry_to_item(entry, language) for entry in parsed.entries]

    return ParsedFeed(
        url=url,
        title=_clean(feed.get("title")),
        link=_clean(feed.get("link")),
        description=_clean(feed.get("subtitle") or feed.get("description")),
        language=language,
        items=items,
    )


class RSSFetcher:
    """Fetch and parse RSS/Atom feeds, one attempt per call."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize RSS fetcher.

        A shared ``client`` is used as-is (and left open); otherwise a client
        is created per request.
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._client = client

    @property
    def headers(self) -> dict:
        return {"User-Agent": self.user_agent, "Accept": FEED_ACCEPT}

    async def _get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        try:
            response = await client.get(
                url, headers=self.headers, timeout=self.timeout, follow_redirects=True
            )
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise FetchError(url, f"Status code {status}", status_code=status) from e
        except httpx.TimeoutException as e:
            raise FetchError(url, f"Request timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise FetchError(url, f"HTTP error: {e}") from e

    async def fetch_feed(self, url: str) -> ParsedFeed:
        """Fetch and parse a single feed."""
        if self._client is not None:
            response = await self._get(self._client, url)
        else:
            async with httpx.AsyncClient() as client:
                response = await self._get(client, url)

        content_type = response.headers.get("content-type")
        feed = parse_feed(url, response.content, content_type)
        logger.debug("Parsed %d items from %s", feed.item_count, url)
        return feed
