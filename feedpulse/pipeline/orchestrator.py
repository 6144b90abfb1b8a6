"""Ingestion orchestrator: one fetch/normalize/persist/health pass per source."""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol

import httpx
from psycopg_pool import AsyncConnectionPool

from ..config import ConfigModel
from ..db import ArticleStore, SourceRegistry
from ..ingestion import (
    ArticlePersister,
    FetchError,
    ItemNormalizer,
    ParseError,
    PersistenceError,
    RSSFetcher,
    SourceHealthReport,
    SourceHealthTracker,
)
from ..models import Source

logger = logging.getLogger(__name__)

NO_SOURCES_MESSAGE = "Aucune source à récupérer"
CYCLE_DONE_MESSAGE = "Récupération des articles terminée"


class SourceLister(Protocol):
    async def list_all_sources(self) -> List[Source]: ...


class CycleState(str, Enum):
    """Where the orchestrator is within a cycle."""

    IDLE = "idle"
    RUNNING = "running"
    SUMMARIZED = "summarized"


@dataclass
class SourceOutcome:
    """Result of processing one source."""

    source_name: str
    success: bool
    articles_added: int = 0
    message: str = ""


@dataclass
class CycleSummary:
    """Summary of one ingestion cycle."""

    success: bool
    message: str
    total_sources: int = 0
    total_articles: int = 0
    duration: float = 0.0
    outcomes: List[SourceOutcome] = field(default_factory=list)

    @property
    def failed_sources(self) -> List[SourceOutcome]:
        return [o for o in self.outcomes if not o.success]

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "totalSources": self.total_sources,
            "totalArticles": self.total_articles,
        }


class IngestionOrchestrator:
    """Drive ingestion cycles over every configured source."""

    def __init__(
        self,
        registry: SourceLister,
        fetcher: RSSFetcher,
        normalizer: ItemNormalizer,
        persister: ArticlePersister,
        health: SourceHealthTracker,
    ) -> None:
        """Initialize ingestion orchestrator."""
        self.registry = registry
        self.fetcher = fetcher
        self.normalizer = normalizer
        self.persister = persister
        self.health = health
        self.state = CycleState.IDLE
        self.last_summary: Optional[CycleSummary] = None

    async def _record_health(self, source: Source, error: Optional[BaseException], item_count: int = 0) -> None:
        """Update source health; a failing write is logged, never raised."""
        try:
            if error is None:
                await self.health.record_success(source, item_count)
            else:
                await self.health.record_failure(source, error)
        except Exception:
            logger.exception("Could not update health of source %s", source.name)

    async def process_source(self, source: Source) -> SourceOutcome:
        """Run the pipeline for one source and report what happened."""
        try:
            feed = await self.fetcher.fetch_feed(source.rss_url)
        except (FetchError, ParseError) as e:
            logger.warning("Fetching %s failed: %s", source.name, e)
            await self._record_health(source, e)
            return SourceOutcome(source.name, False, 0, str(e))
        except Exception as e:
            logger.exception("Unexpected error fetching %s", source.name)
            await self._record_health(source, e)
            return SourceOutcome(source.name, False, 0, str(e))

        try:
            candidates = await self.normalizer.normalize_all(feed.items, source)
            added = await self.persister.persist(candidates)
        except PersistenceError as e:
            logger.error("Persisting articles of %s failed: %s", source.name, e)
            await self._record_health(source, e)
            return SourceOutcome(source.name, False, 0, str(e))
        except Exception as e:
            logger.exception("Unexpected error processing %s", source.name)
            await self._record_health(source, e)
            return SourceOutcome(source.name, False, 0, str(e))

        await self._record_health(source, None, feed.item_count)
        logger.info(
            "%s: %d items in feed, %d candidates, %d new articles",
            source.name,
            feed.item_count,
            len(candidates),
            added,
        )
        return SourceOutcome(source.name, True, added, f"{added} new articles")

    async def ingest_source(self, source: Source) -> int:
        """Run the pipeline for exactly one source and return the added count."""
        outcome = await self.process_source(source)
        return outcome.articles_added

    async def _run_cycle(self) -> CycleSummary:
        try:
            sources = await self.registry.list_all_sources()
        except Exception as e:
            logger.error("Could not list sources: %s", e)
            return CycleSummary(success=False, message=str(e))

        if not sources:
            logger.info(NO_SOURCES_MESSAGE)
            return CycleSummary(success=True, message=NO_SOURCES_MESSAGE)

        logger.info("Fetching articles for %d sources", len(sources))
        outcomes = []
        for source in sources:
            outcomes.append(await self.process_source(source))

        return CycleSummary(
            success=True,
            message=CYCLE_DONE_MESSAGE,
            total_sources=len(sources),
            total_articles=sum(o.articles_added for o in outcomes),
            outcomes=outcomes,
        )

    async def ingest_all_sources(self) -> CycleSummary:
        """Run one full cycle. Never raises."""
        start = time.monotonic()
        self.state = CycleState.RUNNING
        try:
            summary = await self._run_cycle()
        except Exception as e:
            logger.exception("Ingestion cycle aborted")
            summary = CycleSummary(success=False, message=str(e))

        summary.duration = time.monotonic() - start
        self.state = CycleState.SUMMARIZED
        self.last_summary = summary
        if summary.success:
            logger.info(
                "Cycle finished in %.1fs: %d new articles from %d sources (%d failed)",
                summary.duration,
                summary.total_articles,
                summary.total_sources,
                len(summary.failed_sources),
            )
        self.state = CycleState.IDLE
        return summary

    async def report_source_health(self) -> SourceHealthReport:
        """Read-only health summary of all sources."""
        return await self.health.report()


def create_orchestrator(
    config: ConfigModel,
    pool: AsyncConnectionPool,
    client: Optional[httpx.AsyncClient] = None,
) -> IngestionOrchestrator:
    """Wire an orchestrator to the Postgres registry and article store."""
    registry = SourceRegistry(pool)
    return IngestionOrchestrator(
        registry=registry,
        fetcher=RSSFetcher(
            timeout=config.ingestion.timeout_seconds,
            user_agent=config.ingestion.user_agent,
            client=client,
        ),
        normalizer=ItemNormalizer(config.ingestion),
        persister=ArticlePersister(ArticleStore(pool)),
        health=SourceHealthTracker(registry),
    )
