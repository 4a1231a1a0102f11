"""On-demand digests — preview or send a user's digest outside the schedule."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from taskflow.config import settings
from taskflow.digest.composer import compose
from taskflow.timeutil import local_date, utcnow
from taskflow.tracker.models import DEFAULT_OUTSTANDING_STATUSES

if TYPE_CHECKING:
    from datetime import datetime

    from taskflow.digest.composer import DigestContent
    from taskflow.mail.models import SendRecord
    from taskflow.mail.sender import MailSender
    from taskflow.scheduler.store import ScheduleStore
    from taskflow.tracker.models import User
    from taskflow.tracker.store import TrackerStore

logger = logging.getLogger(__name__)


class DigestService:
    """Builds the digest a user would get right now, using their schedule's filters.

    Unlike the scheduled run, an empty task list still produces a digest,
    and sending never moves the schedule's watermark.
    """

    def __init__(
        self,
        tracker: TrackerStore,
        schedules: ScheduleStore,
        sender: MailSender,
        app_url: str | None = None,
    ) -> None:
        self._tracker = tracker
        self._schedules = schedules
        self._sender = sender
        self._app_url = app_url

    async def build_for_user(
        self, user_id: str, now: datetime | None = None
    ) -> tuple[User, DigestContent]:
        """Compose the user's digest. Raises ``LookupError`` for an unknown user."""
        user = await self._tracker.get_user(user_id)
        if user is None:
            msg = f"User not found: {user_id}"
            raise LookupError(msg)

        schedule = await self._schedules.get_for_user(user_id)
        if schedule is not None:
            statuses = schedule.outstanding_statuses
            project_ids = schedule.include_project_ids
            tz = schedule.timezone
        else:
            statuses = DEFAULT_OUTSTANDING_STATUSES
            project_ids = frozenset()
            tz = user.timezone or settings.default_timezone

        tasks = await self._tracker.find_outstanding(user_id, statuses, project_ids)
        content = compose(
            tasks,
            user.email,
            today=local_date(now or utcnow(), tz),
            app_url=self._app_url,
        )
        return user, content

    async def preview(self, user_id: str, now: datetime | None = None) -> DigestContent:
        _, content = await self.build_for_user(user_id, now)
        return content

    async def send_test(self, user_id: str, now: datetime | None = None) -> SendRecord:
        user, content = await self.build_for_user(user_id, now)
        record = await self._sender.send(
            to=user.email,
            subject=content.subject,
            body_html=content.body_html,
            body_text=content.body_text,
            user_id=user.id,
        )
        logger.info("Test digest sent to %s (%d tasks)", user.email, content.task_count)
        return record
