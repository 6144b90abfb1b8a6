"""Source registry backed by Postgres."""

from datetime import datetime
from typing import Dict, List

from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from ..config import SourceConfig
from ..models import FetchStatus, Source

SOURCE_COLUMNS = """
    id, name, url, rss_url, favicon_url, description, orientation, categories,
    enabled, last_fetched_at, fetch_status, created_at, updated_at
"""


class SourceRegistry:
    """Read sources and write their health fields."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self.pool = pool

    async def list_all_sources(self) -> List[Source]:
        """List the sources an ingestion cycle should visit."""
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    f"SELECT {SOURCE_COLUMNS} FROM sources WHERE enabled = TRUE ORDER BY id"
                )
                rows = await cur.fetchall()
        return [Source.model_validate(row) for row in rows]

    async def list_sources(self, include_disabled: bool = True) -> List[Source]:
        """List sources for reporting."""
        query = f"SELECT {SOURCE_COLUMNS} FROM sources"
        if not include_disabled:
            query += " WHERE enabled = TRUE"
        query += " ORDER BY name"
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query)
                rows = await cur.fetchall()
        return [Source.model_validate(row) for row in rows]

    async def update_source_health(
        self,
        source_id: int,
        last_fetched_at: datetime,
        fetch_status: FetchStatus,
    ) -> None:
        """Write the health fields of one source. Nothing else is touched."""
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    UPDATE sources
                    SET last_fetched_at = %s,
                        fetch_status = %s
                    WHERE id = %s
                    """,
                    (last_fetched_at, Jsonb(fetch_status.model_dump(mode="json")), source_id),
                )

    async def sync_sources(self, sources: List[SourceConfig]) -> Dict[str, int]:
        """
        Sync sources from config to database.

        Returns:
            Mapping of source name to database ID
        """
        source_map = {}

        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                for source in sources:
                    await cur.execute(
                        """
                        INSERT INTO sources (
                            name, url, rss_url, favicon_url, description,
                            orientation, categories, enabled
                        )
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                        ON CONFLICT (name) DO UPDATE SET
                            url = EXCLUDED.url,
                            rss_url = EXCLUDED.rss_url,
                            favicon_url = EXCLUDED.favicon_url,
                            description = EXCLUDED.description,
                            orientation = EXCLUDED.orientation,
                            categories = EXCLUDED.categories,
                            enabled = EXCLUDED.enabled
                        RETURNING id
                        """,
                        (
                            source.name,
                            source.url,
                            source.rss_url,
                            source.favicon_url,
                            source.description,
                            source.orientation,
                            source.categories,
                            source.enabled,
                        ),
                    )
                    row = await cur.fetchone()
                    source_map[source.name] = row["id"]

        return source_map
