"""Database management for feedpulse."""

from .articles import ArticleStore, UpsertResult
from .connection import close_connection_pool, get_connection, get_connection_pool
from .init import init_database, validate_connection
from .sources import SourceRegistry

__all__ = [
    "ArticleStore",
    "SourceRegistry",
    "UpsertResult",
    "close_connection_pool",
    "get_connection",
    "get_connection_pool",
    "init_database",
    "validate_connection",
]
