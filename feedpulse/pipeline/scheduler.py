"""Interval scheduler for ingestion cycles."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

import schedule

logger = logging.getLogger(__name__)

CycleFunc = Callable[[], Awaitable[object]]


class IngestionScheduler:
    """Run a cycle at startup, then every ``interval_minutes``.

    Ticks that fire while a cycle is still running are skipped. ``stop()``
    ends the loop after the in-flight cycle, if any, completes.
    """

    def __init__(
        self,
        run_cycle: CycleFunc,
        interval_minutes: int = 30,
        run_on_start: bool = True,
        poll_seconds: float = 5.0,
    ) -> None:
        self.run_cycle = run_cycle
        self.interval_minutes = interval_minutes
        self.run_on_start = run_on_start
        self.poll_seconds = poll_seconds
        self.jobs = schedule.Scheduler()
        self.cycles_started = 0
        self.cycles_skipped = 0
        self._stop = asyncio.Event()
        self._in_progress = False
        self._tasks: Set[asyncio.Task] = set()

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def stop(self) -> None:
        """Ask the loop to exit."""
        self._stop.set()

    async def _run_guarded(self) -> None:
        if self._in_progress:
            self.cycles_skipped += 1
            logger.warning("Previous ingestion cycle still running, skipping this tick")
            return

        self._in_progress = True
        self.cycles_started += 1
        logger.info("Starting scheduled ingestion cycle #%d", self.cycles_started)
        try:
            result = await self.run_cycle()
            if getattr(result, "success", True) is False:
                logger.error("Ingestion cycle failed: %s", getattr(result, "message", result))
        except Exception:
            logger.exception("Ingestion cycle raised; waiting for next tick")
        finally:
            self._in_progress = False

    def trigger(self) -> Optional[asyncio.Task]:
        """Start a cycle in the background unless one is already running."""
        if self._in_progress:
            self.cycles_skipped += 1
            logger.warning("Previous ingestion cycle still running, skipping this tick")
            return None
        task = asyncio.get_running_loop().create_task(self._run_guarded())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run_forever(self) -> None:
        """Run until ``stop()`` is called."""
        self.jobs.clear()
        self.jobs.every(self.interval_minutes).minutes.do(self.trigger)
        logger.info("Scheduler started, ingesting every %d minutes", self.interval_minutes)

        if self.run_on_start:
            self.trigger()

        while not self._stop.is_set():
            self.jobs.run_pending()
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.poll_seconds)
            except asyncio.TimeoutError:
                pass

        self.jobs.clear()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        logger.info("Scheduler stopped")
