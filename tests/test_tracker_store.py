"""Tests for TrackerStore — users, projects, and the outstanding-task query."""

from datetime import date

import pytest

from taskflow.tracker.models import (
    DEFAULT_OUTSTANDING_STATUSES,
    Priority,
    Project,
    Task,
    TaskStatus,
    User,
)
from taskflow.tracker.store import TrackerStore


@pytest.fixture
async def seeded(tracker: TrackerStore) -> TrackerStore:
    """Two users; Ada owns an active and an archived project."""
    await tracker.add_user(User(id="ada", email="ada@example.com", timezone="UTC"))
    await tracker.add_user(User(id="bob", email="bob@example.com"))
    await tracker.add_project(Project(id="active", user_id="ada", name="Active"))
    await tracker.add_project(Project(id="old", user_id="ada", name="Old", archived=True))
    await tracker.add_project(Project(id="bobs", user_id="bob", name="Bob's"))
    return tracker


def _task(task_id: str, project_id: str, user_id: str = "ada", **kwargs) -> Task:
    return Task(id=task_id, user_id=user_id, project_id=project_id, title=task_id, **kwargs)


# -- Users ---------------------------------------------------------------------


async def test_add_and_get_user(tracker: TrackerStore) -> None:
    user = User(id="u1", email="grace@example.com", name="Grace", timezone="Europe/London")
    await tracker.add_user(user)
    assert await tracker.get_user("u1") == user


async def test_get_missing_user(tracker: TrackerStore) -> None:
    assert await tracker.get_user("missing") is None


# -- Projects ------------------------------------------------------------------


async def test_set_archived(seeded: TrackerStore) -> None:
    assert await seeded.set_archived("active", True) is True
    assert await seeded.set_archived("nope", True) is False


# -- Outstanding tasks ---------------------------------------------------------


async def test_default_scope_skips_archived_projects(seeded: TrackerStore) -> None:
    await seeded.add_task(_task("t1", "active"))
    await seeded.add_task(_task("t2", "old"))

    tasks = await seeded.find_outstanding("ada", DEFAULT_OUTSTANDING_STATUSES)
    assert [t.id for t in tasks] == ["t1"]
    assert tasks[0].project.name == "Active"


async def test_explicit_projects_include_archived(seeded: TrackerStore) -> None:
    await seeded.add_task(_task("t1", "active"))
    await seeded.add_task(_task("t2", "old"))

    tasks = await seeded.find_outstanding("ada", DEFAULT_OUTSTANDING_STATUSES, ["old"])
    assert [t.id for t in tasks] == ["t2"]
    assert tasks[0].project.archived is True


async def test_filters_by_status(seeded: TrackerStore) -> None:
    await seeded.add_task(_task("open", "active", status=TaskStatus.BACKLOG))
    await seeded.add_task(_task("done", "active", status=TaskStatus.DONE))
    await seeded.add_task(_task("stuck", "active", status=TaskStatus.BLOCKED))

    default = await seeded.find_outstanding("ada", DEFAULT_OUTSTANDING_STATUSES)
    assert {t.id for t in default} == {"open", "stuck"}

    blocked = await seeded.find_outstanding("ada", [TaskStatus.BLOCKED])
    assert [t.id for t in blocked] == ["stuck"]


async def test_empty_statuses_returns_nothing(seeded: TrackerStore) -> None:
    await seeded.add_task(_task("t1", "active"))
    assert await seeded.find_outstanding("ada", []) == []


async def test_only_own_tasks(seeded: TrackerStore) -> None:
    await seeded.add_task(_task("mine", "active"))
    await seeded.add_task(_task("theirs", "bobs", user_id="bob"))

    tasks = await seeded.find_outstanding("ada", DEFAULT_OUTSTANDING_STATUSES, ["active", "bobs"])
    assert [t.id for t in tasks] == ["mine"]


async def test_ordering_priority_then_due_with_undated_last(seeded: TrackerStore) -> None:
    await seeded.add_task(_task("p2-undated", "active", priority=Priority.P2))
    await seeded.add_task(
        _task("p2-late", "active", priority=Priority.P2, due_date=date(2025, 7, 1))
    )
    await seeded.add_task(
        _task("p2-soon", "active", priority=Priority.P2, due_date=date(2025, 6, 1))
    )
    await seeded.add_task(_task("p0", "active", priority=Priority.P0))

    tasks = await seeded.find_outstanding("ada", DEFAULT_OUTSTANDING_STATUSES)
    assert [t.id for t in tasks] == ["p0", "p2-soon", "p2-late", "p2-undated"]


async def test_task_round_trip(seeded: TrackerStore) -> None:
    task = _task(
        "t1",
        "active",
        description="Details",
        status=TaskStatus.IN_PROGRESS,
        priority=Priority.P1,
        due_date=date(2025, 6, 30),
    )
    await seeded.add_task(task)

    [fetched] = await seeded.find_outstanding("ada", DEFAULT_OUTSTANDING_STATUSES)
    assert fetched.due_date == date(2025, 6, 30)
    assert fetched.status is TaskStatus.IN_PROGRESS
    assert fetched.priority is Priority.P1
    assert fetched.description == "Details"
    assert fetched.updated_at == task.updated_at
