"""Async database access over libsql.

The ``libsql`` driver is synchronous, so every call is pushed onto a worker
thread with ``asyncio.to_thread()``.  The connection target comes from
settings:

- **Production**: ``TURSO_DATABASE_URL`` + ``TURSO_AUTH_TOKEN`` → remote Turso
- **Dev/test**: no Turso env vars → local SQLite file via ``database_path``

Stores use the ``connection()`` context manager, which also applies the
store's DDL the first time a given database target is opened.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import libsql

from taskflow.config import settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

logger = logging.getLogger(__name__)

# (target, schema) pairs whose DDL has already run in this process.
_applied_schemas: set[tuple[str, str]] = set()


class AsyncCursor:
    """Awaitable view of a libsql cursor."""

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor

    async def fetchone(self) -> tuple | None:
        return await asyncio.to_thread(self._cursor.fetchone)

    async def fetchall(self) -> list[tuple]:
        return await asyncio.to_thread(self._cursor.fetchall)

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount


class AsyncConnection:
    """Awaitable view of a libsql connection."""

    def __init__(self, conn: Any, target: str) -> None:
        self._conn = conn
        self.target = target

    async def execute(self, sql: str, params: tuple = ()) -> AsyncCursor:
        cursor = await asyncio.to_thread(self._conn.execute, sql, params)
        return AsyncCursor(cursor)

    async def execute_script(self, script: str) -> None:
        """Run ``;``-separated statements one at a time."""
        for statement in script.split(";"):
            if statement.strip():
                await self.execute(statement)

    async def commit(self) -> None:
        await asyncio.to_thread(self._conn.commit)

    async def close(self) -> None:
        await asyncio.to_thread(self._conn.close)


def _open_local(path: str) -> Any:
    conn = libsql.connect(path)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")
    return conn


async def get_connection(local_path_override: Path | None = None) -> AsyncConnection:
    """Open a connection; the caller is responsible for closing it.

    *local_path_override* (test isolation) wins over everything else, then
    a configured Turso URL, then the local ``database_path``.
    """
    if local_path_override:
        local_path_override.parent.mkdir(parents=True, exist_ok=True)
        conn = await asyncio.to_thread(_open_local, str(local_path_override))
        return AsyncConnection(conn, str(local_path_override))

    if settings.turso_database_url:
        conn = await asyncio.to_thread(
            libsql.connect,
            database=settings.turso_database_url,
            auth_token=settings.turso_auth_token,
        )
        return AsyncConnection(conn, settings.turso_database_url)

    settings.database_path.parent.mkdir(parents=True, exist_ok=True)
    conn = await asyncio.to_thread(_open_local, str(settings.database_path))
    return AsyncConnection(conn, str(settings.database_path))


@asynccontextmanager
async def connection(
    local_path_override: Path | None = None,
    *,
    schema: str = "",
) -> AsyncIterator[AsyncConnection]:
    """Yield an open connection with *schema* applied, closing it afterwards."""
    db = await get_connection(local_path_override)
    try:
        key = (db.target, schema)
        if schema and key not in _applied_schemas:
            await db.execute_script(schema)
            await db.commit()
            _applied_schemas.add(key)
            logger.debug("Applied schema to %s", db.target)
        yield db
    finally:
        await db.close()
