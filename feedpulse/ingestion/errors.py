"""Ingestion error taxonomy.

Recovery levels:

- ``ItemNormalizationError``: the item is dropped, the feed continues.
- ``FetchError`` / ``ParseError``: the source is marked failed, the cycle continues.
- ``PersistenceError``: the whole batch for the source fails, the cycle continues.
- ``FeedValidationError``: carries a user-facing message for feed previews.
"""

from typing import Optional


class IngestionError(Exception):
    """Base class for ingestion errors."""


class FetchError(IngestionError):
    """Network failure, timeout or non-2xx response while fetching a feed."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(IngestionError):
    """Response body could not be parsed as a feed."""

    def __init__(self, url: str, message: str, content_type: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url
        self.content_type = content_type


class ItemNormalizationError(IngestionError):
    """A single feed item could not be turned into an article."""


class PersistenceError(IngestionError):
    """Database failure during duplicate check or bulk upsert."""


class FeedValidationError(IngestionError):
    """A candidate feed failed preview validation.

    The message is meant to be shown to the person onboarding the feed.
    """
