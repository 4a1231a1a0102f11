"""Tests for user registration."""

import pytest

from taskflow.accounts import register_user
from taskflow.scheduler.store import ScheduleStore
from taskflow.tracker.store import TrackerStore


async def test_register_creates_disabled_default_schedule(
    tracker: TrackerStore, schedules: ScheduleStore
) -> None:
    user, schedule = await register_user(
        tracker, schedules, "  Ada@Example.COM ", name="Ada", timezone="Europe/London"
    )

    assert user.email == "ada@example.com"
    assert await tracker.get_user(user.id) == user
    assert schedule.user_id == user.id
    assert schedule.enabled is False
    assert schedule.timezone == "Europe/London"
    assert await schedules.get_for_user(user.id) == schedule


async def test_register_defaults_timezone(
    tracker: TrackerStore, schedules: ScheduleStore
) -> None:
    user, schedule = await register_user(tracker, schedules, "bob@example.com", user_id="bob")
    assert user.id == "bob"
    assert user.timezone == "America/Los_Angeles"
    assert schedule.timezone == "America/Los_Angeles"


async def test_register_rejects_unknown_timezone(
    tracker: TrackerStore, schedules: ScheduleStore
) -> None:
    with pytest.raises(ValueError, match="Unknown timezone"):
        await register_user(tracker, schedules, "x@example.com", timezone="Nowhere/Land")
