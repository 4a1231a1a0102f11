"""Email schedule data model and settings validation."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, replace
from datetime import UTC, datetime, time
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskflow.timeutil import (
    DAY_NAMES,
    format_instant,
    format_time_of_day,
    is_valid_timezone,
    parse_instant,
    parse_time_of_day,
)
from taskflow.tracker.models import DEFAULT_OUTSTANDING_STATUSES, TaskStatus

DEFAULT_TIME_OF_DAY = time(8, 0)


class Cadence(StrEnum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"


class ScheduleConfigError(ValueError):
    """A schedule's fields are inconsistent (e.g. WEEKLY with no day)."""


@dataclass
class Schedule:
    """A user's recurring digest configuration.

    Attributes:
        id: Unique identifier (UUID hex).
        user_id: Owning user.
        enabled: Disabled schedules are never evaluated.
        cadence: ``DAILY`` or ``WEEKLY``.
        day_of_week: 0 = Sunday … 6 = Saturday. Only used for ``WEEKLY``.
        time_of_day: Local wall-clock send time, interpreted in *timezone*.
        timezone: IANA timezone governing all window and weekday math.
        include_project_ids: Restrict the digest to these projects; empty
            means every non-archived project.
        outstanding_statuses: Task statuses reported as outstanding.
        last_sent_at: Watermark — UTC instant of the last completed fire.
    """

    id: str
    user_id: str
    timezone: str
    enabled: bool = False
    cadence: Cadence = Cadence.DAILY
    day_of_week: int | None = None
    time_of_day: time = DEFAULT_TIME_OF_DAY
    include_project_ids: frozenset[str] = frozenset()
    outstanding_statuses: frozenset[TaskStatus] = DEFAULT_OUTSTANDING_STATUSES
    last_sent_at: datetime | None = None
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        self.cadence = Cadence(self.cadence)
        self.include_project_ids = frozenset(self.include_project_ids)
        self.outstanding_statuses = frozenset(TaskStatus(s) for s in self.outstanding_statuses)
        if not self.created_at:
            self.created_at = datetime.now(UTC).isoformat()
        if not self.updated_at:
            self.updated_at = self.created_at

    @property
    def is_weekly(self) -> bool:
        return self.cadence is Cadence.WEEKLY

    def describe(self) -> str:
        """Short human summary, e.g. ``weekly on Monday at 08:00 (UTC)``."""
        when = format_time_of_day(self.time_of_day)
        if self.is_weekly and self.day_of_week is not None:
            return f"weekly on {DAY_NAMES[self.day_of_week]} at {when} ({self.timezone})"
        return f"{self.cadence.value.lower()} at {when} ({self.timezone})"

    def validate(self) -> None:
        """Raise ``ScheduleConfigError`` if the fields are inconsistent."""
        if self.is_weekly and self.day_of_week is None:
            msg = "WEEKLY schedules require day_of_week (0=Sunday .. 6=Saturday)"
            raise ScheduleConfigError(msg)
        if self.day_of_week is not None and not 0 <= self.day_of_week <= 6:
            msg = f"day_of_week must be between 0 and 6, got {self.day_of_week}"
            raise ScheduleConfigError(msg)
        if not is_valid_timezone(self.timezone):
            msg = f"Unknown timezone: {self.timezone!r}"
            raise ScheduleConfigError(msg)

    # -- Serialization ---------------------------------------------------------

    def to_row(self) -> tuple:
        """Serialize to a tuple matching the ``email_schedules`` column order."""
        return (
            self.id,
            self.user_id,
            int(self.enabled),
            self.cadence.value,
            self.day_of_week,
            format_time_of_day(self.time_of_day),
            self.timezone,
            json.dumps(sorted(self.include_project_ids)),
            json.dumps(sorted(s.value for s in self.outstanding_statuses)),
            format_instant(self.last_sent_at) if self.last_sent_at else None,
            self.created_at,
            self.updated_at,
        )

    @classmethod
    def from_row(cls, row: tuple) -> Schedule:
        """Deserialize from a row. Raises ``ValueError`` on malformed stored data."""
        statuses = json.loads(row[8]) if row[8] else None
        return cls(
            id=row[0],
            user_id=row[1],
            enabled=bool(row[2]),
            cadence=Cadence(row[3]),
            day_of_week=row[4],
            time_of_day=parse_time_of_day(row[5]),
            timezone=row[6],
            include_project_ids=frozenset(json.loads(row[7]) if row[7] else ()),
            outstanding_statuses=(
                frozenset(TaskStatus(s) for s in statuses)
                if statuses is not None
                else DEFAULT_OUTSTANDING_STATUSES
            ),
            last_sent_at=parse_instant(row[9]),
            created_at=row[10],
            updated_at=row[11],
        )


def make_schedule_id() -> str:
    return uuid.uuid4().hex


def default_schedule(user_id: str, timezone: str) -> Schedule:
    """The disabled daily 08:00 schedule every new user starts with."""
    return Schedule(id=make_schedule_id(), user_id=user_id, timezone=timezone)


class ScheduleSettings(BaseModel):
    """A user's schedule settings update. Unset fields keep their current value."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool | None = None
    cadence: Cadence | None = None
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    time_of_day: str | None = Field(default=None, description="24-hour HH:MM")
    timezone: str | None = None
    include_project_ids: list[str] | None = None
    outstanding_statuses: list[TaskStatus] | None = Field(default=None, min_length=1)

    @field_validator("time_of_day")
    @classmethod
    def _check_time_of_day(cls, value: str | None) -> str | None:
        if value is not None:
            parse_time_of_day(value)
        return value

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str | None) -> str | None:
        if value is not None and not is_valid_timezone(value):
            msg = f"Unknown timezone: {value!r}"
            raise ValueError(msg)
        return value

    def apply_to(self, schedule: Schedule) -> Schedule:
        """Return a copy of *schedule* with these settings merged in and validated."""
        changes: dict[str, Any] = {}
        for key, value in self.model_dump(exclude_unset=True).items():
            # Explicit null clears day_of_week; for every other field it means "no change".
            if value is None and key != "day_of_week":
                continue
            if key == "time_of_day":
                value = parse_time_of_day(value)
            elif key in ("include_project_ids", "outstanding_statuses"):
                value = frozenset(value)
            changes[key] = value
        changes["updated_at"] = datetime.now(UTC).isoformat()
        updated = replace(schedule, **changes)
        updated.validate()
        return updated

