"""Users, projects, and tasks — the data the digests report on."""

from taskflow.tracker.models import (
    DEFAULT_OUTSTANDING_STATUSES,
    Priority,
    Project,
    Task,
    TaskStatus,
    User,
)
from taskflow.tracker.store import TrackerStore

__all__ = [
    "DEFAULT_OUTSTANDING_STATUSES",
    "Priority",
    "Project",
    "Task",
    "TaskStatus",
    "TrackerStore",
    "User",
]
