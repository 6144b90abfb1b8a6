"""Per-source fetch health tracking."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Protocol

from ..models import FetchStatus, Source

logger = logging.getLogger(__name__)


class SourceHealthStore(Protocol):
    async def list_sources(self, include_disabled: bool = True) -> List[Source]: ...

    async def update_source_health(
        self, source_id: int, last_fetched_at: datetime, fetch_status: FetchStatus
    ) -> None: ...


def success_message(item_count: int) -> str:
    return f"{item_count} articles récupérés"


@dataclass
class SourceHealthReport:
    """Counts of healthy, failing and never-fetched sources."""

    healthy: int = 0
    failing: int = 0
    never_fetched: int = 0
    failing_sources: List[Source] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.healthy + self.failing + self.never_fetched


class SourceHealthTracker:
    """Record the outcome of each fetch attempt on its source."""

    def __init__(
        self,
        registry: SourceHealthStore,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.registry = registry
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def _record(self, source: Source, success: bool, message: str) -> FetchStatus:
        now = self.clock()
        status = FetchStatus(success=success, message=message, timestamp=now)
        await self.registry.update_source_health(source.id, now, status)
        return status

    async def record_success(self, source: Source, item_count: int) -> FetchStatus:
        """Mark a source healthy; also done when the feed had no usable items."""
        return await self._record(source, True, success_message(item_count))

    async def record_failure(self, source: Source, error: BaseException) -> FetchStatus:
        """Mark a source failed with the error's message."""
        message = str(error) or error.__class__.__name__
        return await self._record(source, False, message)

    async def report(self) -> SourceHealthReport:
        """Summarize source health. Read-only; the summary is logged."""
        sources = await self.registry.list_sources(include_disabled=True)
        report = SourceHealthReport()
        for source in sources:
            if source.fetch_status is None:
                report.never_fetched += 1
            elif source.fetch_status.success:
                report.healthy += 1
            else:
                report.failing += 1
                report.failing_sources.append(source)

        logger.info(
            "Source health: %d healthy, %d failing, %d never fetched",
            report.healthy,
            report.failing,
            report.never_fetched,
        )
        for source in report.failing_sources:
            logger.warning("Failing source %s: %s", source.name, source.fetch_status.message)
        return report
