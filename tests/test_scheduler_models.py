"""Tests for the Schedule model and ScheduleSettings validation."""

from datetime import UTC, datetime, time

import pytest
from pydantic import ValidationError

from taskflow.scheduler.models import (
    Cadence,
    Schedule,
    ScheduleConfigError,
    ScheduleSettings,
    default_schedule,
)
from taskflow.tracker.models import DEFAULT_OUTSTANDING_STATUSES, TaskStatus
from tests.factories import make_schedule

# -- Schedule ------------------------------------------------------------------


def test_default_schedule_is_disabled_daily_at_eight() -> None:
    schedule = default_schedule("user1", "Europe/Berlin")
    assert schedule.enabled is False
    assert schedule.cadence is Cadence.DAILY
    assert schedule.time_of_day == time(8, 0)
    assert schedule.day_of_week is None
    assert schedule.include_project_ids == frozenset()
    assert schedule.outstanding_statuses == DEFAULT_OUTSTANDING_STATUSES
    assert schedule.last_sent_at is None
    assert schedule.timezone == "Europe/Berlin"


def test_post_init_coerces_strings() -> None:
    schedule = make_schedule(
        cadence="WEEKLY",
        day_of_week=2,
        outstanding_statuses=["BLOCKED"],
        include_project_ids=["p1", "p1"],
    )
    assert schedule.cadence is Cadence.WEEKLY
    assert schedule.outstanding_statuses == frozenset({TaskStatus.BLOCKED})
    assert schedule.include_project_ids == frozenset({"p1"})


def test_row_round_trip() -> None:
    original = make_schedule(
        cadence=Cadence.WEEKLY,
        day_of_week=5,
        time_of_day=time(17, 45),
        timezone="Asia/Tokyo",
        include_project_ids={"b", "a"},
        outstanding_statuses={TaskStatus.IN_PROGRESS},
        last_sent_at=datetime(2025, 6, 6, 8, 45, tzinfo=UTC),
    )
    row = original.to_row()
    assert row[5] == "17:45"
    assert row[7] == '["a", "b"]'

    restored = Schedule.from_row(row)
    assert restored == original


def test_from_row_without_statuses_uses_default() -> None:
    row = list(make_schedule().to_row())
    row[8] = None
    assert Schedule.from_row(tuple(row)).outstanding_statuses == DEFAULT_OUTSTANDING_STATUSES


def test_describe() -> None:
    assert make_schedule(time_of_day=time(7, 5)).describe() == "daily at 07:05 (UTC)"
    weekly = make_schedule(cadence=Cadence.WEEKLY, day_of_week=1, time_of_day=time(9, 0))
    assert weekly.describe() == "weekly on Monday at 09:00 (UTC)"


class TestValidate:
    def test_valid_daily(self):
        make_schedule().validate()

    def test_weekly_without_day_rejected(self):
        with pytest.raises(ScheduleConfigError, match="day_of_week"):
            make_schedule(cadence=Cadence.WEEKLY).validate()

    def test_day_out_of_range_rejected(self):
        with pytest.raises(ScheduleConfigError):
            make_schedule(cadence=Cadence.WEEKLY, day_of_week=7).validate()

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ScheduleConfigError, match="timezone"):
            make_schedule(timezone="Mars/Olympus").validate()

    def test_config_error_is_value_error(self):
        assert issubclass(ScheduleConfigError, ValueError)


# -- ScheduleSettings ----------------------------------------------------------


class TestScheduleSettings:
    def test_rejects_bad_time(self):
        with pytest.raises(ValidationError):
            ScheduleSettings(time_of_day="8:00")
        with pytest.raises(ValidationError):
            ScheduleSettings(time_of_day="24:00")

    def test_rejects_bad_day(self):
        with pytest.raises(ValidationError):
            ScheduleSettings(day_of_week=7)
        with pytest.raises(ValidationError):
            ScheduleSettings(day_of_week=-1)

    def test_rejects_unknown_timezone(self):
        with pytest.raises(ValidationError):
            ScheduleSettings(timezone="Not/AZone")

    def test_rejects_empty_statuses(self):
        with pytest.raises(ValidationError):
            ScheduleSettings(outstanding_statuses=[])

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            ScheduleSettings(outstanding_statuses=["ARCHIVED"])

    def test_rejects_unknown_field(self):
        with pytest.raises(ValidationError):
            ScheduleSettings(last_sent_at="2025-01-01T00:00:00+00:00")

    def test_apply_merges_only_set_fields(self):
        schedule = make_schedule(time_of_day=time(8, 0), timezone="UTC")
        updated = ScheduleSettings(time_of_day="18:30").apply_to(schedule)
        assert updated.time_of_day == time(18, 30)
        assert updated.timezone == "UTC"
        assert updated.enabled is True
        assert schedule.time_of_day == time(8, 0)

    def test_apply_weekly_with_day(self):
        updated = ScheduleSettings(cadence="WEEKLY", day_of_week=3).apply_to(make_schedule())
        assert updated.cadence is Cadence.WEEKLY
        assert updated.day_of_week == 3

    def test_apply_weekly_without_day_raises(self):
        with pytest.raises(ScheduleConfigError):
            ScheduleSettings(cadence="WEEKLY").apply_to(make_schedule())

    def test_explicit_null_day_clears_it(self):
        schedule = make_schedule(day_of_week=4)
        updated = ScheduleSettings(day_of_week=None).apply_to(schedule)
        assert updated.day_of_week is None

    def test_null_for_other_fields_means_no_change(self):
        schedule = make_schedule(timezone="Asia/Tokyo")
        updated = ScheduleSettings(timezone=None).apply_to(schedule)
        assert updated.timezone == "Asia/Tokyo"

    def test_apply_never_touches_watermark(self):
        sent = datetime(2025, 6, 2, 8, 0, tzinfo=UTC)
        schedule = make_schedule(last_sent_at=sent)
        updated = ScheduleSettings(enabled=False).apply_to(schedule)
        assert updated.last_sent_at == sent

    def test_apply_converts_collections(self):
        updated = ScheduleSettings(
            include_project_ids=["p1", "p2"],
            outstanding_statuses=["BLOCKED"],
        ).apply_to(make_schedule())
        assert updated.include_project_ids == frozenset({"p1", "p2"})
        assert updated.outstanding_statuses == frozenset({TaskStatus.BLOCKED})
