"""Turn raw feed items into article candidates."""

import asyncio
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ..config import IngestionConfig
from ..models import UNSPECIFIED_CREATOR, Article, Source
from .dates import resolve_published_at
from .errors import ItemNormalizationError
from .images import extract_image
from .models import FeedItem
from .rss_fetcher import html_to_text

logger = logging.getLogger(__name__)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    cut = text[:limit].rsplit(" ", 1)[0] or text[:limit]
    return cut.rstrip(" ,;:.") + "…"


def _unique(values: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for value in values:
        value = value.strip()
        if value and value not in seen:
            seen.append(value)
    return seen


class ItemNormalizer:
    """Build Article candidates from feed items for one source."""

    def __init__(self, config: Optional[IngestionConfig] = None) -> None:
        self.config = config or IngestionConfig()

    def resolve_language(self, raw: Optional[str]) -> str:
        """Reduce ``fr-FR`` style codes to a supported primary subtag."""
        if raw:
            primary = raw.strip().lower().replace("_", "-").split("-")[0]
            if primary in self.config.supported_languages:
                return primary
        return self.config.default_language

    def build_article(
        self, item: FeedItem, source: Source, now: Optional[datetime] = None
    ) -> Article:
        """Build a candidate or raise ItemNormalizationError."""
        if source.id is None:
            raise ItemNormalizationError(f"Source {source.name!r} has no id")

        title = (item.title or "").strip()
        link = (item.link or "").strip()
        if not title:
            raise ItemNormalizationError(f"Item without title ({link or 'no link'})")
        if not link:
            raise ItemNormalizationError(f"Item without link ({title})")

        published_at = resolve_published_at(item, now=now)
        if published_at is None:
            raise ItemNormalizationError(
                f"No valid publication date for {link!r} "
                f"(pub_date={item.pub_date!r}, dc_date={item.dc_date!r})"
            )

        content = item.content_encoded or item.content or ""
        snippet = item.content_snippet or html_to_text(content)

        return Article(
            title=title,
            link=link,
            content=content,
            content_snippet=_truncate(snippet, self.config.snippet_length),
            image=extract_image(item),
            tags=_unique(item.categories),
            language=self.resolve_language(item.language),
            creator=(item.creator or "").strip() or UNSPECIFIED_CREATOR,
            published_at=published_at,
            source_id=source.id,
            source_name=source.name,
            source_favicon=source.favicon_url,
            orientations=list(source.orientation),
            categories=list(source.categories),
        )

    async def normalize(self, item: FeedItem, source: Source) -> Optional[Article]:
        """Normalize one item; any failure rejects only that item."""
        try:
            return self.build_article(item, source)
        except ItemNormalizationError as e:
            logger.warning("Dropping item from %s: %s", source.name, e)
        except Exception:
            logger.exception("Unexpected error normalizing item %r from %s", item.link, source.name)
        return None

    async def normalize_all(self, items: Sequence[FeedItem], source: Source) -> List[Article]:
        """Normalize all items of a feed concurrently, dropping rejects."""
        if not items:
            return []

        limit = self.config.max_concurrent_items
        if limit:
            semaphore = asyncio.Semaphore(limit)

            async def normalize_with_semaphore(item: FeedItem) -> Optional[Article]:
                async with semaphore:
                    return await self.normalize(item, source)

            tasks = [normalize_with_semaphore(item) for item in items]
        else:
            tasks = [self.normalize(item, source) for item in items]

        results = await asyncio.gather(*tasks)
        return [article for article in results if article is not None]
