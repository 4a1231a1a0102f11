"""ScheduleRunner — one pass over every enabled schedule."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from taskflow.digest.composer import compose
from taskflow.scheduler.evaluator import Decision, evaluate
from taskflow.timeutil import format_instant, local_date, utcnow

if TYPE_CHECKING:
    from datetime import datetime

    from taskflow.mail.sender import MailSender
    from taskflow.scheduler.models import Schedule
    from taskflow.scheduler.store import ScheduleStore
    from taskflow.tracker.store import TrackerStore

logger = logging.getLogger(__name__)


class Outcome(StrEnum):
    SKIPPED = "skipped"
    EMPTY = "empty"
    SENT = "sent"


@dataclass
class RunSummary:
    """Counts from one runner pass."""

    started_at: str
    evaluated: int = 0
    skipped: int = 0
    empty: int = 0
    sent: int = 0
    failed: int = 0

    def record(self, outcome: Outcome) -> None:
        if outcome is Outcome.SKIPPED:
            self.skipped += 1
        elif outcome is Outcome.EMPTY:
            self.empty += 1
        else:
            self.sent += 1

    def to_dict(self) -> dict:
        return asdict(self)


class ScheduleRunner:
    """Evaluates all enabled schedules and sends the digests that are due.

    Each schedule is processed independently: a failure is logged, counted,
    and leaves that schedule's watermark untouched so the next pass retries
    while the fire window is still open.

    Passes on the same runner are serialized, so a manual trigger that
    overlaps the periodic one sees the watermark the first pass wrote.
    Separate processes sharing one database are not coordinated.

    Args:
        schedules: ScheduleStore for loading schedules and writing watermarks.
        tracker: TrackerStore for recipients and outstanding tasks.
        sender: MailSender used to dispatch digests.
        app_url: Base URL for digest links (None → settings).
    """

    def __init__(
        self,
        schedules: ScheduleStore,
        tracker: TrackerStore,
        sender: MailSender,
        app_url: str | None = None,
    ) -> None:
        self._schedules = schedules
        self._tracker = tracker
        self._sender = sender
        self._app_url = app_url
        self._lock = asyncio.Lock()

    async def run(self, now: datetime | None = None) -> RunSummary:
        """Process every enabled schedule once at *now* (defaults to the current time)."""
        async with self._lock:
            now = now or utcnow()
            logger.info("Scheduler pass at %s", now.isoformat())
            summary = RunSummary(started_at=format_instant(now))

            for schedule in await self._schedules.find_enabled():
                summary.evaluated += 1
                try:
                    outcome = await self.process(schedule, now)
                except Exception:
                    logger.exception(
                        "Scheduler error for schedule %s (user %s)",
                        schedule.id,
                        schedule.user_id,
                    )
                    summary.failed += 1
                    continue
                summary.record(outcome)

            logger.info(
                "Scheduler pass done: %d evaluated, %d sent, %d empty, %d failed",
                summary.evaluated,
                summary.sent,
                summary.empty,
                summary.failed,
            )
            return summary

    async def process(self, schedule: Schedule, now: datetime) -> Outcome:
        """Evaluate one schedule and act on a FIRE decision."""
        if evaluate(schedule, now) is Decision.SKIP:
            return Outcome.SKIPPED

        user = await self._tracker.get_user(schedule.user_id)
        if user is None:
            msg = f"User {schedule.user_id} for schedule {schedule.id} not found"
            raise LookupError(msg)

        tasks = await self._tracker.find_outstanding(
            schedule.user_id,
            schedule.outstanding_statuses,
            schedule.include_project_ids,
        )
        if not tasks:
            logger.info("No outstanding tasks for schedule %s, skipping email", schedule.id)
            await self._schedules.advance_watermark(schedule.id, now)
            return Outcome.EMPTY

        logger.info("Sending digest for schedule %s to %s", schedule.id, user.email)
        content = compose(
            tasks,
            user.email,
            today=local_date(now, schedule.timezone),
            app_url=self._app_url,
        )
        await self._sender.send(
            to=user.email,
            subject=content.subject,
            body_html=content.body_html,
            body_text=content.body_text,
            user_id=user.id,
        )
        await self._schedules.advance_watermark(schedule.id, now)
        logger.info("Email sent for schedule %s (%d tasks)", schedule.id, content.task_count)
        return Outcome.SENT
