"""Shared test fixtures."""

from pathlib import Path

import pytest

from taskflow.mail.store import EmailLogStore
from taskflow.scheduler.store import ScheduleStore
from taskflow.tracker.store import TrackerStore


@pytest.fixture(autouse=True)
def _no_turso(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure tests use local files, not remote Turso."""
    monkeypatch.setattr("taskflow.config.settings.turso_database_url", "")


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture
def tracker(db_path: Path) -> TrackerStore:
    return TrackerStore(db_path=db_path)


@pytest.fixture
def schedules(db_path: Path) -> ScheduleStore:
    return ScheduleStore(db_path=db_path)


@pytest.fixture
def email_logs(db_path: Path) -> EmailLogStore:
    return EmailLogStore(db_path=db_path)
