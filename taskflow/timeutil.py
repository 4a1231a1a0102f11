"""Timezone conversions shared by the scheduler and the digest.

All wall-clock ↔ instant conversions go through this module so DST handling
lives in one place:

- ``to_local(instant, tz)`` — absolute instant → wall clock in *tz*
- ``to_instant(day, wall, tz)`` — local date + wall-clock time → UTC instant

Instants are always timezone-aware ``datetime`` objects in UTC.  Naive
datetimes are rejected rather than guessed at.

Local times that fall inside a spring-forward gap (e.g. 02:30 on the night
clocks jump from 02:00 to 03:00) resolve using the offset in effect before
the transition, which lands them one hour later on the new offset.  Times
repeated by a fall-back transition resolve to their first occurrence.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime, time
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_TIME_OF_DAY_RE = re.compile(r"^(\d{2}):(\d{2})$")


@lru_cache(maxsize=64)
def get_zone(name: str) -> ZoneInfo:
    """Return the ``ZoneInfo`` for an IANA name. Raises ``ValueError`` if unknown."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        msg = f"Unknown timezone: {name!r}"
        raise ValueError(msg) from exc


def is_valid_timezone(name: str) -> bool:
    try:
        get_zone(name)
    except ValueError:
        return False
    return True


def utcnow() -> datetime:
    return datetime.now(UTC)


def _require_aware(instant: datetime) -> None:
    if instant.tzinfo is None or instant.utcoffset() is None:
        msg = f"Expected a timezone-aware instant, got naive {instant.isoformat()}"
        raise ValueError(msg)


def to_local(instant: datetime, tz: str) -> datetime:
    """Convert an absolute instant to wall-clock time in *tz*."""
    _require_aware(instant)
    return instant.astimezone(get_zone(tz))


def to_instant(day: date, wall: time, tz: str) -> datetime:
    """Interpret *day* at *wall* o'clock in *tz* and return the UTC instant."""
    local = datetime(day.year, day.month, day.day, wall.hour, wall.minute, tzinfo=get_zone(tz))
    return local.astimezone(UTC)


def local_date(instant: datetime, tz: str) -> date:
    """Calendar date of *instant* as seen in *tz*."""
    return to_local(instant, tz).date()


def weekday_sunday_first(local: datetime | date) -> int:
    """Day of week with 0 = Sunday … 6 = Saturday."""
    return local.isoweekday() % 7


def iso_week(local: datetime | date) -> tuple[int, int]:
    """``(iso_year, iso_week)`` of a local date."""
    cal = local.isocalendar()
    return cal[0], cal[1]


# -- Persistence formats --------------------------------------------------------


def parse_time_of_day(text: str) -> time:
    """Parse a 24-hour ``HH:MM`` string. Raises ``ValueError`` on bad input."""
    match = _TIME_OF_DAY_RE.match(text.strip()) if isinstance(text, str) else None
    if match is None:
        msg = f"Time of day must be HH:MM, got {text!r}"
        raise ValueError(msg)
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        msg = f"Time of day out of range: {text!r}"
        raise ValueError(msg)
    return time(hour, minute)


def format_time_of_day(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def format_instant(instant: datetime) -> str:
    """Serialize an instant as fixed-width ISO 8601 UTC text (sortable as a string)."""
    _require_aware(instant)
    return instant.astimezone(UTC).isoformat(timespec="microseconds")


def parse_instant(text: str | None) -> datetime | None:
    """Inverse of ``format_instant``. Naive values are taken to be UTC."""
    if not text:
        return None
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_due_date(day: date) -> str:
    """Human date used in digests, e.g. ``Jun 1, 2025``."""
    return f"{day:%b} {day.day}, {day.year}"


DAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

