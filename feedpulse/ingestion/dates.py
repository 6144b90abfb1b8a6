"""Publication date resolution for feed items."""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from dateutil import parser as date_parser

from .models import FeedItem

logger = logging.getLogger(__name__)

# Abbreviations dateutil does not map on its own, plus the usual UTC aliases.
TIMEZONE_OFFSETS = {
    "GMT": "+0000",
    "UT": "+0000",
    "UTC": "+0000",
    "Z": "+0000",
    "CET": "+0100",
    "CEST": "+0200",
    "BST": "+0100",
    "EST": "-0500",
    "EDT": "-0400",
    "CST": "-0600",
    "CDT": "-0500",
    "MST": "-0700",
    "MDT": "-0600",
    "PST": "-0800",
    "PDT": "-0700",
}

_TZ_ABBREVIATION = re.compile(r"\b(" + "|".join(TIMEZONE_OFFSETS) + r")\s*$")

# Broken feeds commonly emit the epoch or far-future dates.
_MAX_FUTURE = timedelta(days=365)


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)


def is_valid_instant(value: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Whether ``value`` is a plausible publication instant."""
    if value is None:
        return False
    now = now or datetime.now(timezone.utc)
    try:
        utc_value = _to_utc(value)
    except (OverflowError, OSError, ValueError):
        return False
    return utc_value.timestamp() > 0 and utc_value <= now + _MAX_FUTURE


def has_timezone_abbreviation(raw: Optional[str]) -> bool:
    """Whether ``raw`` ends with one of the zone abbreviations we rewrite."""
    return bool(raw) and _TZ_ABBREVIATION.search(raw.strip()) is not None


def substitute_timezone_abbreviation(raw: str) -> str:
    """Rewrite a trailing zone abbreviation (``CEST``, ``EST``...) to a fixed offset."""
    return _TZ_ABBREVIATION.sub(lambda m: TIMEZONE_OFFSETS[m.group(1)], raw.strip())


def parse_date_string(raw: Optional[str]) -> Optional[datetime]:
    """Parse a free-form date string into a UTC datetime, or None."""
    if not raw or not raw.strip():
        return None
    try:
        parsed = date_parser.parse(raw.strip())
    except (ValueError, OverflowError, TypeError):
        return None
    try:
        return _to_utc(parsed)
    except (OverflowError, OSError, ValueError):
        return None


def resolve_published_at(
    item: FeedItem,
    *,
    fallback_to_now: bool = False,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """Resolve the publication instant of ``item``.

    Tries, in order: the date pre-parsed by the feed parser, the Dublin Core
    date, then the display date, both after zone abbreviation substitution. Returns
    None when nothing yields a valid instant, unless ``fallback_to_now`` is set.
    Ingestion must never set ``fallback_to_now``: a made-up publication date
    would corrupt freshness ordering.
    """
    now = now or datetime.now(timezone.utc)

    if item.iso_date is not None and is_valid_instant(item.iso_date, now):
        return _to_utc(item.iso_date)

    dc_date = parse_date_string(item.dc_date and substitute_timezone_abbreviation(item.dc_date))
    if is_valid_instant(dc_date, now):
        return dc_date

    if item.pub_date:
        pub_date = parse_date_string(substitute_timezone_abbreviation(item.pub_date))
        if is_valid_instant(pub_date, now):
            return pub_date

    if fallback_to_now:
        return now
    return None
