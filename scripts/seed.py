#!/usr/bin/env python3
"""Seed a local database with a demo user, projects, and tasks.

Usage:
    uv run python scripts/seed.py
    uv run python scripts/seed.py --enable --time 08:00
"""

import argparse
import asyncio
import sys
from datetime import date, timedelta
from pathlib import Path

# Allow running from project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from taskflow.accounts import register_user
from taskflow.config import settings
from taskflow.scheduler.models import ScheduleSettings
from taskflow.scheduler.store import ScheduleStore
from taskflow.tracker.models import Priority, Project, Task, TaskStatus
from taskflow.tracker.store import TrackerStore

DEMO_EMAIL = "demo@taskflow.app"


async def seed(enable: bool, time_of_day: str) -> None:
    tracker = TrackerStore.get()
    schedules = ScheduleStore.get()

    user, _ = await register_user(
        tracker, schedules, DEMO_EMAIL, name="Demo User", timezone=settings.default_timezone
    )
    print(f"Created user: {user.email} ({user.id})")

    website = await tracker.add_project(
        Project(
            id="project-demo-1",
            user_id=user.id,
            name="Website Redesign",
            description="Full redesign of the company website with new branding",
        )
    )
    mobile = await tracker.add_project(
        Project(
            id="project-demo-2",
            user_id=user.id,
            name="Mobile App MVP",
            description="Build the first version of the mobile app",
        )
    )
    print(f"Created projects: {website.name}, {mobile.name}")

    today = date.today()
    demo_tasks = [
        (website, "Audit current site and gather feedback", TaskStatus.DONE, Priority.P1, None),
        (website, "Create new wireframes for homepage", TaskStatus.IN_PROGRESS, Priority.P0,
         today + timedelta(days=2)),
        (website, "Design system: colors, typography, spacing", TaskStatus.IN_PROGRESS,
         Priority.P1, today + timedelta(days=5)),
        (website, "Write new copy for About page", TaskStatus.BACKLOG, Priority.P2, None),
        (website, "Set up staging environment", TaskStatus.BLOCKED, Priority.P0,
         today - timedelta(days=1)),
        (mobile, "Define MVP feature list", TaskStatus.IN_PROGRESS, Priority.P1,
         today + timedelta(days=3)),
        (mobile, "Choose push notification provider", TaskStatus.BACKLOG, Priority.P3, None),
    ]
    for i, (project, title, status, priority, due) in enumerate(demo_tasks, start=1):
        await tracker.add_task(
            Task(
                id=f"task-demo-{i}",
                user_id=user.id,
                project_id=project.id,
                title=title,
                status=status,
                priority=priority,
                due_date=due,
            )
        )
    print(f"Created {len(demo_tasks)} tasks")

    if enable:
        schedule = await schedules.update_settings(
            user.id,
            ScheduleSettings(enabled=True, time_of_day=time_of_day),
            timezone=settings.default_timezone,
        )
        print(f"Enabled schedule: {schedule.describe()}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed TaskFlow demo data")
    parser.add_argument("--enable", action="store_true", help="Enable the demo schedule")
    parser.add_argument("--time", default="08:00", help="Schedule time of day (HH:MM)")
    args = parser.parse_args()
    asyncio.run(seed(args.enable, args.time))


if __name__ == "__main__":
    main()
