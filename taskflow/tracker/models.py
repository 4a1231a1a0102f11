"""User, Project, and Task data models."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import StrEnum


class TaskStatus(StrEnum):
    BACKLOG = "BACKLOG"
    IN_PROGRESS = "IN_PROGRESS"
    BLOCKED = "BLOCKED"
    DONE = "DONE"

    @property
    def label(self) -> str:
        """Display form, e.g. ``IN PROGRESS``."""
        return self.value.replace("_", " ")


class Priority(StrEnum):
    """Task priority. ``P0`` is the most urgent."""

    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"

    @property
    def rank(self) -> int:
        return int(self.value[1:])


DEFAULT_OUTSTANDING_STATUSES = frozenset(
    {TaskStatus.BACKLOG, TaskStatus.IN_PROGRESS, TaskStatus.BLOCKED}
)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def make_id() -> str:
    return uuid.uuid4().hex


@dataclass
class User:
    id: str
    email: str
    name: str = ""
    timezone: str = ""
    created_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = _now_iso()

    def to_row(self) -> tuple:
        return (self.id, self.email, self.name, self.timezone, self.created_at)

    @classmethod
    def from_row(cls, row: tuple) -> User:
        return cls(
            id=row[0],
            email=row[1],
            name=row[2] or "",
            timezone=row[3] or "",
            created_at=row[4],
        )


@dataclass
class Project:
    id: str
    user_id: str
    name: str
    description: str = ""
    archived: bool = False
    created_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = _now_iso()

    def to_row(self) -> tuple:
        return (
            self.id,
            self.user_id,
            self.name,
            self.description,
            int(self.archived),
            self.created_at,
        )

    @classmethod
    def from_row(cls, row: tuple) -> Project:
        return cls(
            id=row[0],
            user_id=row[1],
            name=row[2],
            description=row[3] or "",
            archived=bool(row[4]),
            created_at=row[5],
        )


@dataclass
class Task:
    """A tracked task.

    Attributes:
        due_date: Calendar date the task is due, or None.
        updated_at: ISO 8601 timestamp; used as the final tie-breaker when
            ordering tasks in a digest (most recent first).
        project: The owning project, populated by queries that join it.
    """

    id: str
    user_id: str
    project_id: str
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.BACKLOG
    priority: Priority = Priority.P2
    due_date: date | None = None
    created_at: str = ""
    updated_at: str = ""
    completed_at: str | None = None
    project: Project | None = None

    def __post_init__(self) -> None:
        self.status = TaskStatus(self.status)
        self.priority = Priority(self.priority)
        if not self.created_at:
            self.created_at = _now_iso()
        if not self.updated_at:
            self.updated_at = self.created_at

    def to_row(self) -> tuple:
        """Serialize to a tuple matching the ``tasks`` column order."""
        return (
            self.id,
            self.user_id,
            self.project_id,
            self.title,
            self.description,
            self.status.value,
            self.priority.value,
            self.due_date.isoformat() if self.due_date else None,
            self.created_at,
            self.updated_at,
            self.completed_at,
        )

    @classmethod
    def from_row(cls, row: tuple, project: Project | None = None) -> Task:
        return cls(
            id=row[0],
            user_id=row[1],
            project_id=row[2],
            title=row[3],
            description=row[4] or "",
            status=TaskStatus(row[5]),
            priority=Priority(row[6]),
            due_date=date.fromisoformat(row[7]) if row[7] else None,
            created_at=row[8],
            updated_at=row[9],
            completed_at=row[10],
            project=project,
        )
