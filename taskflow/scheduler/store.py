"""ScheduleStore — libsql persistence for email schedules."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from taskflow.db import connection
from taskflow.scheduler.models import Schedule, default_schedule
from taskflow.timeutil import format_instant

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path

    from taskflow.scheduler.models import ScheduleSettings

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS email_schedules (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    enabled INTEGER NOT NULL DEFAULT 0,
    cadence TEXT NOT NULL DEFAULT 'DAILY',
    day_of_week INTEGER,
    time_of_day TEXT NOT NULL DEFAULT '08:00',
    timezone TEXT NOT NULL,
    include_project_ids TEXT NOT NULL DEFAULT '[]',
    outstanding_statuses TEXT NOT NULL DEFAULT '["BACKLOG", "BLOCKED", "IN_PROGRESS"]',
    last_sent_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_email_schedules_user ON email_schedules (user_id)
"""

_COLUMNS = (
    "id, user_id, enabled, cadence, day_of_week, time_of_day, timezone,"
    " include_project_ids, outstanding_statuses, last_sent_at, created_at, updated_at"
)


class ScheduleStore:
    """Persists email schedules in SQLite / Turso.

    Singleton accessed via ``ScheduleStore.get()``.  Pass an explicit
    *db_path* for test isolation (e.g. ``tmp_path / "test.db"``).
    """

    _instance: ScheduleStore | None = None

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path

    @classmethod
    def get(cls) -> ScheduleStore:
        """Return the shared ScheduleStore instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    def _connect(self):  # noqa: ANN202
        return connection(self._db_path, schema=_SCHEMA)

    # -- CRUD ------------------------------------------------------------------

    async def add(self, schedule: Schedule) -> Schedule:
        """Insert a new schedule. Returns the same schedule object."""
        schedule.validate()
        async with self._connect() as db:
            await db.execute(
                f"INSERT INTO email_schedules ({_COLUMNS})"
                " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                schedule.to_row(),
            )
            await db.commit()
        logger.info("Added email schedule %s for user %s", schedule.id, schedule.user_id)
        return schedule

    async def get_schedule(self, schedule_id: str) -> Schedule | None:
        """Fetch a schedule by ID, or None if not found."""
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM email_schedules WHERE id = ?", (schedule_id,)
            )
            row = await cursor.fetchone()
        return Schedule.from_row(row) if row else None

    async def get_for_user(self, user_id: str) -> Schedule | None:
        """The user's schedule (the oldest, if several exist)."""
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM email_schedules WHERE user_id = ?"
                " ORDER BY created_at LIMIT 1",
                (user_id,),
            )
            row = await cursor.fetchone()
        return Schedule.from_row(row) if row else None

    async def ensure_default(self, user_id: str, timezone: str) -> Schedule:
        """Return the user's schedule, creating the disabled default if missing."""
        existing = await self.get_for_user(user_id)
        if existing is not None:
            return existing
        return await self.add(default_schedule(user_id, timezone))

    async def update_settings(
        self, user_id: str, changes: ScheduleSettings, *, timezone: str
    ) -> Schedule:
        """Apply validated settings to the user's schedule, creating it if needed.

        *timezone* is used only when a schedule has to be created.  Raises
        ``ScheduleConfigError`` if the merged result is inconsistent; the
        watermark is never touched here.
        """
        current = await self.get_for_user(user_id)
        if current is None:
            return await self.add(changes.apply_to(default_schedule(user_id, timezone)))

        updated = changes.apply_to(current)
        row = updated.to_row()
        async with self._connect() as db:
            await db.execute(
                """
                UPDATE email_schedules
                SET enabled = ?, cadence = ?, day_of_week = ?, time_of_day = ?,
                    timezone = ?, include_project_ids = ?, outstanding_statuses = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (*row[2:9], row[11], updated.id),
            )
            await db.commit()
        logger.info("Updated email schedule %s: %s", updated.id, updated.describe())
        return updated

    async def find_enabled(self) -> list[Schedule]:
        """Return all enabled schedules.

        Rows that can no longer be parsed are logged and left out so one bad
        row cannot block every other user's digest.
        """
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM email_schedules WHERE enabled = 1 ORDER BY created_at"
            )
            rows = await cursor.fetchall()

        schedules = []
        for row in rows:
            try:
                schedules.append(Schedule.from_row(row))
            except (ValueError, TypeError):
                logger.exception("Skipping unreadable email schedule row: %s", row[0])
        return schedules

    async def advance_watermark(self, schedule_id: str, instant: datetime) -> bool:
        """Set ``last_sent_at`` to *instant* if that moves it forward.

        Returns True if the row was updated, False if the schedule is missing
        or already has a watermark at or after *instant*.
        """
        ts = format_instant(instant)
        async with self._connect() as db:
            cursor = await db.execute(
                "UPDATE email_schedules SET last_sent_at = ?"
                " WHERE id = ? AND (last_sent_at IS NULL OR last_sent_at < ?)",
                (ts, schedule_id, ts),
            )
            await db.commit()
            advanced = cursor.rowcount > 0
        if not advanced:
            logger.warning("Watermark for schedule %s not advanced to %s", schedule_id, ts)
        return advanced
