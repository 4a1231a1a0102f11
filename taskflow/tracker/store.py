"""TrackerStore — users, projects, and tasks via libsql."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from taskflow.db import connection
from taskflow.tracker.models import Project, Task, TaskStatus, User

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL DEFAULT '',
    timezone TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    archived INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    project_id TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL,
    priority TEXT NOT NULL,
    due_date TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    completed_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_tasks_user_status ON tasks (user_id, status)
"""

_TASK_COLUMNS = (
    "t.id, t.user_id, t.project_id, t.title, t.description, t.status, t.priority,"
    " t.due_date, t.created_at, t.updated_at, t.completed_at"
)
_PROJECT_COLUMNS = "p.id, p.user_id, p.name, p.description, p.archived, p.created_at"


class TrackerStore:
    """Persists users, projects, and tasks.

    Singleton accessed via ``TrackerStore.get()``.  Pass an explicit
    *db_path* for test isolation (e.g. ``tmp_path / "test.db"``).
    """

    _instance: TrackerStore | None = None

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path

    @classmethod
    def get(cls) -> TrackerStore:
        """Return the shared TrackerStore instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    def _connect(self):  # noqa: ANN202
        return connection(self._db_path, schema=_SCHEMA)

    # -- Users -----------------------------------------------------------------

    async def add_user(self, user: User) -> User:
        async with self._connect() as db:
            await db.execute(
                "INSERT INTO users (id, email, name, timezone, created_at)"
                " VALUES (?, ?, ?, ?, ?)",
                user.to_row(),
            )
            await db.commit()
        logger.info("Added user: %s (%s)", user.email, user.id)
        return user

    async def get_user(self, user_id: str) -> User | None:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT id, email, name, timezone, created_at FROM users WHERE id = ?",
                (user_id,),
            )
            row = await cursor.fetchone()
        return User.from_row(row) if row else None

    # -- Projects --------------------------------------------------------------

    async def add_project(self, project: Project) -> Project:
        async with self._connect() as db:
            await db.execute(
                "INSERT INTO projects (id, user_id, name, description, archived, created_at)"
                " VALUES (?, ?, ?, ?, ?, ?)",
                project.to_row(),
            )
            await db.commit()
        return project

    async def set_archived(self, project_id: str, archived: bool) -> bool:
        """Archive or unarchive a project. Returns True if a row was updated."""
        async with self._connect() as db:
            cursor = await db.execute(
                "UPDATE projects SET archived = ? WHERE id = ?",
                (int(archived), project_id),
            )
            await db.commit()
            return cursor.rowcount > 0

    # -- Tasks -----------------------------------------------------------------

    async def add_task(self, task: Task) -> Task:
        async with self._connect() as db:
            await db.execute(
                """
                INSERT INTO tasks
                    (id, user_id, project_id, title, description, status, priority,
                     due_date, created_at, updated_at, completed_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                task.to_row(),
            )
            await db.commit()
        return task

    async def find_outstanding(
        self,
        user_id: str,
        statuses: Iterable[TaskStatus],
        project_ids: Iterable[str] = (),
    ) -> list[Task]:
        """Return the user's tasks in *statuses*, each with its project attached.

        With *project_ids* the result is limited to those projects (archived
        or not); without, it covers every non-archived project.  Rows are
        ordered by priority, then due date with undated tasks last.
        """
        status_values = sorted({TaskStatus(s).value for s in statuses})
        if not status_values:
            return []
        wanted_projects = sorted(set(project_ids))

        clauses = ["t.user_id = ?", "p.user_id = ?"]
        params: list[str] = [user_id, user_id]
        clauses.append(f"t.status IN ({', '.join('?' * len(status_values))})")
        params.extend(status_values)
        if wanted_projects:
            clauses.append(f"p.id IN ({', '.join('?' * len(wanted_projects))})")
            params.extend(wanted_projects)
        else:
            clauses.append("p.archived = 0")

        sql = (
            f"SELECT {_TASK_COLUMNS}, {_PROJECT_COLUMNS}"
            " FROM tasks t JOIN projects p ON p.id = t.project_id"
            f" WHERE {' AND '.join(clauses)}"
            " ORDER BY t.priority ASC, t.due_date IS NULL, t.due_date ASC"
        )
        async with self._connect() as db:
            cursor = await db.execute(sql, tuple(params))
            rows = await cursor.fetchall()

        tasks = []
        for row in rows:
            project = Project.from_row(row[11:])
            tasks.append(Task.from_row(row[:11], project=project))
        logger.debug("find_outstanding(user=%s) -> %d task(s)", user_id, len(tasks))
        return tasks
