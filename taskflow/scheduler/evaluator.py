"""Schedule evaluator — decides whether a schedule should fire at a given instant.

``evaluate(schedule, now)`` is pure with respect to the watermark: it only
reads ``schedule.last_sent_at``.  Persisting a new watermark after a fire
has been acted upon is the caller's job.

A schedule fires when all of these hold:

1. ``now`` is inside ``[start, start + FIRE_WINDOW)``, where ``start`` is
   today's ``time_of_day`` in the schedule's timezone converted to UTC.
   A pass that arrives after the window closes misses that day's slot;
   there is no catch-up.
2. For ``WEEKLY`` schedules, today (local) is ``day_of_week``.
3. The watermark does not show the slot as already handled: for ``DAILY``
   the last send must be on an earlier local date; for ``WEEKLY`` it must
   not share both the local ISO week and the local date with ``now``.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

from taskflow.scheduler.models import Cadence
from taskflow.timeutil import iso_week, to_instant, to_local, weekday_sunday_first

if TYPE_CHECKING:
    from datetime import datetime

    from taskflow.scheduler.models import Schedule

logger = logging.getLogger(__name__)

# Must be at least as wide as the trigger interval so no slot falls between passes.
FIRE_WINDOW = timedelta(minutes=5)


class Decision(StrEnum):
    SKIP = "skip"
    FIRE = "fire"


def fire_window(schedule: Schedule, now: datetime) -> tuple[datetime, datetime]:
    """Today's (local) fire window for *schedule* as UTC instants ``[start, end)``."""
    local_now = to_local(now, schedule.timezone)
    start = to_instant(local_now.date(), schedule.time_of_day, schedule.timezone)
    return start, start + FIRE_WINDOW


def evaluate(schedule: Schedule, now: datetime) -> Decision:
    """Return ``Decision.FIRE`` if *schedule* is due at *now*, else ``Decision.SKIP``.

    Raises ``ValueError`` if *now* is naive.
    """
    if not schedule.enabled:
        return Decision.SKIP

    local_now = to_local(now, schedule.timezone)
    start, end = fire_window(schedule, now)
    if not start <= now < end:
        return Decision.SKIP

    if schedule.cadence is Cadence.WEEKLY:
        if schedule.day_of_week is None:
            logger.warning(
                "Schedule %s is WEEKLY without day_of_week; never firing", schedule.id
            )
            return Decision.SKIP
        if weekday_sunday_first(local_now) != schedule.day_of_week:
            return Decision.SKIP

    if schedule.last_sent_at is not None:
        last_local = to_local(schedule.last_sent_at, schedule.timezone)
        same_day = last_local.date() == local_now.date()
        if schedule.cadence is Cadence.DAILY and same_day:
            logger.info("Already sent today for schedule %s, skipping", schedule.id)
            return Decision.SKIP
        if (
            schedule.cadence is Cadence.WEEKLY
            and same_day
            and iso_week(last_local) == iso_week(local_now)
        ):
            logger.info("Already sent this week for schedule %s, skipping", schedule.id)
            return Decision.SKIP

    return Decision.FIRE
