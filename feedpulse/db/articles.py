"""Article storage."""

import logging
from dataclasses import dataclass
from typing import List, Optional

import psycopg
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from ..ingestion.errors import PersistenceError
from ..models import Article

logger = logging.getLogger(__name__)

UPSERT_SQL = """
INSERT INTO articles (
    title, link, content, content_snippet, image, tags, language, creator,
    published_at, source_id, source_name, source_favicon, orientations, categories
)
SELECT
    x.title, x.link, x.content, x.content_snippet, x.image,
    ARRAY(SELECT jsonb_array_elements_text(x.tags)),
    x.language, x.creator, x.published_at, x.source_id, x.source_name, x.source_favicon,
    ARRAY(SELECT jsonb_array_elements_text(x.orientations)),
    ARRAY(SELECT jsonb_array_elements_text(x.categories))
FROM jsonb_to_recordset(%s) AS x(
    title TEXT, link TEXT, content TEXT, content_snippet TEXT, image TEXT, tags JSONB,
    language TEXT, creator TEXT, published_at TIMESTAMPTZ, source_id INTEGER,
    source_name TEXT, source_favicon TEXT, orientations JSONB, categories JSONB
)
ON CONFLICT (link) DO UPDATE SET
    title = EXCLUDED.title,
    content = EXCLUDED.content,
    content_snippet = EXCLUDED.content_snippet,
    image = EXCLUDED.image,
    tags = EXCLUDED.tags,
    language = EXCLUDED.language,
    creator = EXCLUDED.creator,
    published_at = EXCLUDED.published_at,
    source_id = EXCLUDED.source_id,
    source_name = EXCLUDED.source_name,
    source_favicon = EXCLUDED.source_favicon,
    orientations = EXCLUDED.orientations,
    categories = EXCLUDED.categories
RETURNING (xmax = 0) AS inserted
"""

UPSERT_FIELDS = (
    "title", "link", "content", "content_snippet", "image", "tags", "language", "creator",
    "published_at", "source_id", "source_name", "source_favicon", "orientations", "categories",
)


@dataclass
class UpsertResult:
    """Counts reported by a bulk upsert."""

    inserted_count: int = 0
    modified_count: int = 0


class ArticleStore:
    """Duplicate lookups and bulk writes for articles."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self.pool = pool

    async def find_existing(self, title: str, source_id: int) -> Optional[Article]:
        """Find an article with the same title from the same source."""
        try:
            async with self.pool.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT * FROM articles
                        WHERE title = %s AND source_id = %s
                        LIMIT 1
                        """,
                        (title, source_id),
                    )
                    row = await cur.fetchone()
        except psycopg.Error as e:
            raise PersistenceError(f"Duplicate check failed: {e}") from e
        return Article.model_validate(row) if row else None

    async def bulk_upsert_by_link(self, articles: List[Article]) -> UpsertResult:
        """Insert or overwrite articles keyed by link in one statement.

        ``articles`` must not contain the same link twice.
        """
        if not articles:
            return UpsertResult()

        payload = [article.model_dump(mode="json", include=set(UPSERT_FIELDS)) for article in articles]
        try:
            async with self.pool.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(UPSERT_SQL, (Jsonb(payload),))
                    rows = await cur.fetchall()
        except psycopg.Error as e:
            raise PersistenceError(f"Bulk upsert failed: {e}") from e

        inserted = sum(1 for row in rows if row["inserted"])
        return UpsertResult(inserted_count=inserted, modified_count=len(rows) - inserted)

    async def delete_expired(self, days: int) -> int:
        """Delete articles ingested more than ``days`` days ago."""
        try:
            async with self.pool.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        "DELETE FROM articles WHERE created_at < now() - make_interval(days => %s)",
                        (days,),
                    )
                    deleted = cur.rowcount
        except psycopg.Error as e:
            raise PersistenceError(f"Retention cleanup failed: {e}") from e
        logger.info("Deleted %d articles older than %d days", deleted, days)
        return deleted

    async def count(self) -> int:
        """Count stored articles."""
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT COUNT(*) AS total FROM articles")
                row = await cur.fetchone()
        return row["total"]
