"""Data models for feedpulse."""

from .article import UNSPECIFIED_CREATOR, Article
from .source import FetchStatus, Source

__all__ = ["Article", "FetchStatus", "Source", "UNSPECIFIED_CREATOR"]
