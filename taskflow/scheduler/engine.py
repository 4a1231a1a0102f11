"""SchedulerEngine — APScheduler lifecycle for the periodic digest pass."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from taskflow.config import settings
from taskflow.timeutil import utcnow

if TYPE_CHECKING:
    from taskflow.scheduler.runner import RunSummary, ScheduleRunner

logger = logging.getLogger(__name__)

JOB_ID = "process-email-schedules"


class SchedulerEngine:
    """Runs ``ScheduleRunner.run()`` on a fixed interval.

    The hosting process owns the engine and its start/stop lifecycle;
    ``start()`` is a no-op when already running.

    Args:
        runner: ScheduleRunner executed on each tick.
        interval_seconds: Seconds between passes (default from settings).
        start_delay_seconds: Delay before the first pass (default from settings).
    """

    def __init__(
        self,
        runner: ScheduleRunner,
        interval_seconds: int | None = None,
        start_delay_seconds: int | None = None,
    ) -> None:
        self._runner = runner
        self._interval = interval_seconds or settings.scheduler_interval_seconds
        self._start_delay = (
            settings.scheduler_start_delay_seconds
            if start_delay_seconds is None
            else start_delay_seconds
        )
        self._scheduler = AsyncIOScheduler(timezone="UTC")
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    # -- Lifecycle -------------------------------------------------------------

    async def start(self) -> None:
        """Add the interval job and start the scheduler."""
        if self._running:
            logger.debug("Scheduler already running")
            return
        self._scheduler.add_job(
            self._tick,
            trigger=IntervalTrigger(seconds=self._interval, timezone="UTC"),
            id=JOB_ID,
            name="Process email schedules",
            next_run_time=utcnow() + timedelta(seconds=self._start_delay),
            max_instances=1,
            coalesce=True,
            misfire_grace_time=self._interval,
            replace_existing=True,
        )
        self._scheduler.start()
        self._running = True
        logger.info(
            "Scheduler started — checking email schedules every %ds", self._interval
        )

    async def stop(self) -> None:
        """Shut down the scheduler."""
        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    # -- Triggers --------------------------------------------------------------

    async def run_now(self) -> RunSummary:
        """Run one pass immediately (manual or HTTP trigger). Errors propagate."""
        return await self._runner.run()

    async def _tick(self) -> None:
        """Callback invoked by APScheduler. A failed pass never stops the timer."""
        try:
            await self._runner.run()
        except Exception:
            logger.exception("Scheduled pass failed")

    def next_run_time(self):  # noqa: ANN201
        job = self._scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None
