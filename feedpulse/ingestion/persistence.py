"""Duplicate suppression and bulk persistence of article candidates."""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

from ..models import Article

logger = logging.getLogger(__name__)


class ArticleRepository(Protocol):
    async def find_existing(self, title: str, source_id: int) -> Optional[Article]: ...

    async def bulk_upsert_by_link(self, articles: List[Article]) -> Any: ...


def collapse_by_link(articles: Sequence[Article]) -> List[Article]:
    """Keep one candidate per link; the last one wins, at its own position."""
    by_link: Dict[str, Article] = {}
    for article in articles:
        by_link.pop(article.link, None)
        by_link[article.link] = article
    return list(by_link.values())


class ArticlePersister:
    """Decide which candidates are new and write them in one batch."""

    def __init__(self, store: ArticleRepository) -> None:
        self.store = store

    async def filter_new(self, candidates: Sequence[Article]) -> List[Article]:
        """Drop candidates whose (title, source) pair is already stored."""
        existing = await asyncio.gather(
            *(self.store.find_existing(c.title, c.source_id) for c in candidates)
        )
        return [c for c, found in zip(candidates, existing) if found is None]

    async def persist(self, candidates: Sequence[Article]) -> int:
        """Persist new candidates and return how many were added.

        The count is taken after duplicate suppression and in-batch link
        collapsing. A survivor whose link is already stored overwrites that
        row, so the count can exceed the number of physical inserts.
        PersistenceError propagates: the batch commits whole or not at all.
        """
        if not candidates:
            return 0

        new_articles = await self.filter_new(candidates)
        batch = collapse_by_link(new_articles)
        if len(batch) < len(new_articles):
            logger.info(
                "Collapsed %d candidates sharing a link into %d",
                len(new_articles),
                len(batch),
            )
        if not batch:
            return 0

        result = await self.store.bulk_upsert_by_link(batch)
        logger.debug(
            "Upserted %d articles (%s inserted, %s modified)",
            len(batch),
            getattr(result, "inserted_count", "?"),
            getattr(result, "modified_count", "?"),
        )
        return len(batch)
