"""User registration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from taskflow.config import settings
from taskflow.timeutil import is_valid_timezone
from taskflow.tracker.models import User, make_id

if TYPE_CHECKING:
    from taskflow.scheduler.models import Schedule
    from taskflow.scheduler.store import ScheduleStore
    from taskflow.tracker.store import TrackerStore

logger = logging.getLogger(__name__)


async def register_user(
    tracker: TrackerStore,
    schedules: ScheduleStore,
    email: str,
    *,
    name: str = "",
    timezone: str | None = None,
    user_id: str | None = None,
) -> tuple[User, Schedule]:
    """Create a user together with their disabled default digest schedule."""
    tz = timezone or settings.default_timezone
    if not is_valid_timezone(tz):
        msg = f"Unknown timezone: {tz!r}"
        raise ValueError(msg)

    user = await tracker.add_user(
        User(id=user_id or make_id(), email=email.strip().lower(), name=name, timezone=tz)
    )
    schedule = await schedules.ensure_default(user.id, tz)
    logger.info("Registered user %s with schedule %s", user.email, schedule.id)
    return user, schedule
