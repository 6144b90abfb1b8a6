"""Preview and validate a candidate feed without persisting anything."""

import logging
import re
from datetime import datetime
from typing import List, Optional

import httpx
from pydantic import BaseModel, Field

from ..ingestion import FeedValidationError, FetchError, ParseError, RSSFetcher, extract_image, resolve_published_at
from ..ingestion.models import FeedItem

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 5
REQUIRED_ITEM_FIELDS = ("title", "link")

_URL_FORMAT = re.compile(r"^(http|https)://[^ \"]+$")

INVALID_URL = "L'URL n'est pas dans un format valide. Elle doit commencer par http:// ou https://"
NOT_FOUND = "Cette page n'existe pas sur le site (erreur 404)"
FORBIDDEN = "Le site refuse l'accès à ce contenu (erreur 403)"
HOST_NOT_FOUND = "Ce site web n'existe pas. Vérifiez l'URL."
NOT_A_FEED = "Cette URL ne correspond pas à un flux RSS valide"
WRONG_CONTENT_TYPE = "Cette page existe mais ce n'est pas un flux RSS valide"
EMPTY_FEED = "Le flux RSS ne contient aucun article"
MISSING_FIELD = "Le format du flux RSS est invalide : champ {field} manquant"
UNREACHABLE = "Impossible de lire le contenu de cette URL comme un flux RSS"

_DNS_FAILURE_MARKERS = (
    "name or service not known",
    "temporary failure in name resolution",
    "nodename nor servname",
    "getaddrinfo",
    "enotfound",
    "no address associated",
)


class PreviewItem(BaseModel):
    """One sample item of a previewed feed."""

    title: Optional[str] = None
    link: Optional[str] = None
    published_at: Optional[datetime] = None
    image: Optional[str] = None
    snippet: Optional[str] = None


class FeedPreview(BaseModel):
    """What a candidate feed would yield."""

    title: Optional[str] = None
    description: Optional[str] = None
    link: Optional[str] = None
    sample_items: List[PreviewItem] = Field(default_factory=list)
    total_items: int = 0


def _is_dns_failure(error: FetchError) -> bool:
    cause = error.__cause__
    if not isinstance(cause, httpx.ConnectError):
        return False
    text = str(cause).lower()
    return any(marker in text for marker in _DNS_FAILURE_MARKERS)


def user_message(error: Exception) -> str:
    """Translate a fetch/parse failure into a message for the user."""
    if isinstance(error, FetchError):
        if error.status_code == 404:
            return NOT_FOUND
        if error.status_code == 403:
            return FORBIDDEN
        if _is_dns_failure(error):
            return HOST_NOT_FOUND
        return UNREACHABLE
    if isinstance(error, ParseError):
        content_type = (error.content_type or "").lower()
        if "html" in content_type:
            return WRONG_CONTENT_TYPE
        return NOT_A_FEED
    return UNREACHABLE


def _preview_item(item: FeedItem) -> PreviewItem:
    return PreviewItem(
        title=item.title,
        link=item.link,
        published_at=resolve_published_at(item, fallback_to_now=True),
        image=extract_image(item),
        snippet=item.content_snippet,
    )


async def preview_feed(url: str, fetcher: Optional[RSSFetcher] = None) -> FeedPreview:
    """Fetch ``url`` and describe the feed, raising FeedValidationError on failure."""
    url = (url or "").strip()
    if not _URL_FORMAT.match(url):
        raise FeedValidationError(INVALID_URL)

    fetcher = fetcher or RSSFetcher()
    try:
        feed = await fetcher.fetch_feed(url)
    except (FetchError, ParseError) as e:
        logger.info("Feed preview of %s failed: %s", url, e)
        raise FeedValidationError(user_message(e)) from e

    if not feed.items:
        raise FeedValidationError(EMPTY_FEED)

    first = feed.items[0]
    for field_name in REQUIRED_ITEM_FIELDS:
        if not getattr(first, field_name):
            raise FeedValidationError(MISSING_FIELD.format(field=field_name))

    return FeedPreview(
        title=feed.title,
        description=feed.description,
        link=feed.link,
        sample_items=[_preview_item(item) for item in feed.items[:SAMPLE_SIZE]],
        total_items=feed.item_count,
    )
