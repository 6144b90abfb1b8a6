"""Feed fetching, item normalization and article persistence."""

from .dates import resolve_published_at
from .errors import (
    FeedValidationError,
    FetchError,
    IngestionError,
    ItemNormalizationError,
    ParseError,
    PersistenceError,
)
from .health import SourceHealthReport, SourceHealthTracker
from .images import extract_image
from .models import FeedItem, ParsedFeed
from .normalizer import ItemNormalizer
from .persistence import ArticlePersister
from .rss_fetcher import RSSFetcher

__all__ = [
    "ArticlePersister",
    "FeedItem",
    "FeedValidationError",
    "FetchError",
    "IngestionError",
    "ItemNormalizationError",
    "ItemNormalizer",
    "ParseError",
    "ParsedFeed",
    "PersistenceError",
    "RSSFetcher",
    "SourceHealthReport",
    "SourceHealthTracker",
    "extract_image",
    "resolve_published_at",
]
