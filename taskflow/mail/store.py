"""EmailLogStore — append-only audit log of sent digests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from taskflow.db import connection
from taskflow.mail.models import EmailLog

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS email_logs (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    to_email TEXT NOT NULL,
    subject TEXT NOT NULL,
    body_html TEXT NOT NULL,
    body_text TEXT NOT NULL,
    provider TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_email_logs_user ON email_logs (user_id, created_at)
"""


class EmailLogStore:
    """Writes and reads ``email_logs`` rows. Rows are never updated or deleted.

    Singleton accessed via ``EmailLogStore.get()``.  Pass an explicit
    *db_path* for test isolation.
    """

    _instance: EmailLogStore | None = None

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path

    @classmethod
    def get(cls) -> EmailLogStore:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        cls._instance = None

    async def add(self, log: EmailLog) -> EmailLog:
        async with connection(self._db_path, schema=_SCHEMA) as db:
            await db.execute(
                """
                INSERT INTO email_logs
                    (id, user_id, to_email, subject, body_html, body_text, provider, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                log.to_row(),
            )
            await db.commit()
        logger.debug("Logged email %s to %s", log.id, log.to_email)
        return log

    async def list_for_user(self, user_id: str, limit: int = 20) -> list[EmailLog]:
        """Most recent logs for a user, newest first."""
        async with connection(self._db_path, schema=_SCHEMA) as db:
            cursor = await db.execute(
                "SELECT * FROM email_logs WHERE user_id = ?"
                " ORDER BY created_at DESC LIMIT ?",
                (user_id, limit),
            )
            rows = await cursor.fetchall()
        return [EmailLog.from_row(row) for row in rows]
