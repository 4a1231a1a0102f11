"""Digest composer — turns outstanding tasks into email content.

``compose()`` is pure: the same tasks, recipient, ``today``, and ``app_url``
always produce byte-identical output.  Both renderings are built from one
``ProjectGroup`` list so the plain-text and HTML bodies never disagree.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING

from taskflow.config import settings
from taskflow.timeutil import format_due_date
from taskflow.tracker.models import Priority, TaskStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    from taskflow.tracker.models import Task

_PRIORITY_COLORS = {
    Priority.P0: "#dc2626",
    Priority.P1: "#ea580c",
    Priority.P2: "#d97706",
    Priority.P3: "#6b7280",
}
_STATUS_COLORS = {
    TaskStatus.BACKLOG: "#6b7280",
    TaskStatus.IN_PROGRESS: "#2563eb",
    TaskStatus.BLOCKED: "#dc2626",
    TaskStatus.DONE: "#16a34a",
}
_MUTED = "#6b7280"


@dataclass(frozen=True)
class DigestContent:
    subject: str
    body_html: str
    body_text: str
    task_count: int
    overdue_count: int
    p0_count: int


@dataclass
class ProjectGroup:
    project_id: str
    name: str
    tasks: list[Task] = field(default_factory=list)


def is_overdue(task: Task, today: date) -> bool:
    """True when the task's due date is strictly before *today*."""
    return task.due_date is not None and task.due_date < today


def _sort_key(task: Task) -> tuple:
    # Priority, then due date with undated last, then most recently updated.
    updated = datetime.fromisoformat(task.updated_at).timestamp() if task.updated_at else 0.0
    return (
        task.priority.rank,
        task.due_date is None,
        task.due_date or date.min,
        -updated,
    )


def group_tasks(tasks: Sequence[Task]) -> list[ProjectGroup]:
    """Group by project in first-seen order and sort each group."""
    groups: dict[str, ProjectGroup] = {}
    for task in tasks:
        group = groups.get(task.project_id)
        if group is None:
            name = task.project.name if task.project else task.project_id
            group = groups[task.project_id] = ProjectGroup(task.project_id, name)
        group.tasks.append(task)
    for group in groups.values():
        group.tasks.sort(key=_sort_key)
    return list(groups.values())


def _task_url(app_url: str, task: Task) -> str:
    return f"{app_url}/projects/{task.project_id}?task={task.id}"


def compose(
    tasks: Sequence[Task],
    recipient_email: str,
    *,
    today: date,
    app_url: str | None = None,
) -> DigestContent:
    """Build the subject and both bodies for a digest of *tasks*.

    Args:
        tasks: Outstanding tasks, each ideally carrying its ``project``.
        recipient_email: Shown in the footer.
        today: Local calendar date in the schedule's timezone; tasks due
            before it are flagged overdue.
        app_url: Base URL for links (defaults to ``settings.app_url``).
    """
    base_url = (app_url or settings.app_url).rstrip("/")
    groups = group_tasks(tasks)
    total = len(tasks)
    overdue_count = sum(1 for t in tasks if is_overdue(t, today))
    p0_count = sum(1 for t in tasks if t.priority is Priority.P0)

    subject = f"TaskFlow: {total} outstanding task{'' if total == 1 else 's'}"
    body_text = _render_text(groups, base_url, today, total, overdue_count, p0_count)
    body_html = _render_html(
        groups, base_url, today, recipient_email, total, overdue_count, p0_count
    )
    return DigestContent(
        subject=subject,
        body_html=body_html,
        body_text=body_text,
        task_count=total,
        overdue_count=overdue_count,
        p0_count=p0_count,
    )


# -- Plain text ----------------------------------------------------------------


def _render_text(
    groups: list[ProjectGroup],
    app_url: str,
    today: date,
    total: int,
    overdue_count: int,
    p0_count: int,
) -> str:
    lines = [
        "Outstanding Tasks Summary",
        "=" * 40,
        "",
        f"Total outstanding: {total} | Overdue: {overdue_count} | P0 critical: {p0_count}",
        "",
    ]
    for group in groups:
        lines += ["", group.name, "-" * len(group.name)]
        for task in group.tasks:
            due = f" - Due: {format_due_date(task.due_date)}" if task.due_date else ""
            overdue = " [OVERDUE]" if is_overdue(task, today) else ""
            lines.append(f"[{task.priority}] {task.title} - {task.status}{due}{overdue}")
            lines.append(f"  {_task_url(app_url, task)}")
    return "\n".join(lines) + "\n"


# -- HTML ----------------------------------------------------------------------


def _render_task_row(task: Task, app_url: str, today: date) -> str:
    e = html.escape
    pri_color = _PRIORITY_COLORS.get(task.priority, _MUTED)
    status_color = _STATUS_COLORS.get(task.status, _MUTED)
    description = (
        f'<div style="font-size:13px;color:{_MUTED};margin-top:2px;">{e(task.description)}</div>'
        if task.description
        else ""
    )
    if task.due_date:
        overdue = is_overdue(task, today)
        color = "#dc2626" if overdue else "#374151"
        marker = "&#9888; " if overdue else ""
        due = f'<span style="color:{color};">{marker}{e(format_due_date(task.due_date))}</span>'
    else:
        due = '<span style="color:#9ca3af;">&mdash;</span>'
    return (
        '<tr style="border-bottom:1px solid #f3f4f6;">'
        '<td style="padding:10px 8px;vertical-align:top;width:60px;">'
        f'<span style="background:{pri_color}20;color:{pri_color};border-radius:4px;'
        'padding:2px 6px;font-size:12px;font-weight:600;font-family:monospace;">'
        f"{task.priority}</span></td>"
        '<td style="padding:10px 8px;vertical-align:top;">'
        f'<a href="{e(_task_url(app_url, task))}" style="color:#1d4ed8;text-decoration:none;'
        f'font-weight:500;">{e(task.title)}</a>{description}</td>'
        '<td style="padding:10px 8px;vertical-align:top;white-space:nowrap;">'
        f'<span style="color:{status_color};font-size:13px;">{task.status.label}</span></td>'
        '<td style="padding:10px 8px;vertical-align:top;white-space:nowrap;font-size:13px;">'
        f"{due}</td>"
        "</tr>"
    )


def _render_project(group: ProjectGroup, app_url: str, today: date) -> str:
    e = html.escape
    rows = "".join(_render_task_row(task, app_url, today) for task in group.tasks)
    header_cells = "".join(
        f'<th style="padding:4px 8px;text-align:left;font-weight:600;">{label}</th>'
        for label in ("Pri", "Task", "Status", "Due")
    )
    return (
        '<div style="margin-bottom:28px;">'
        '<h2 style="font-size:16px;font-weight:700;color:#111827;margin:0 0 12px;'
        'border-bottom:2px solid #e5e7eb;padding-bottom:8px;">'
        f'<a href="{e(f"{app_url}/projects/{group.project_id}")}" '
        f'style="color:#111827;text-decoration:none;">{e(group.name)}</a>'
        f'<span style="font-weight:400;font-size:14px;color:{_MUTED};margin-left:8px;">'
        f"({len(group.tasks)})</span></h2>"
        '<table style="width:100%;border-collapse:collapse;">'
        '<thead><tr style="font-size:12px;color:#6b7280;text-transform:uppercase;'
        f'letter-spacing:0.05em;">{header_cells}</tr></thead>'
        f"<tbody>{rows}</tbody></table></div>"
    )


def _render_html(
    groups: list[ProjectGroup],
    app_url: str,
    today: date,
    recipient_email: str,
    total: int,
    overdue_count: int,
    p0_count: int,
) -> str:
    e = html.escape
    summary = (
        '<div style="background:#f0f7ff;border-left:4px solid #3b82f6;padding:16px;'
        'margin-bottom:24px;border-radius:4px;">'
        f"<strong>Total outstanding:</strong> {total} &nbsp;|&nbsp; "
        f'<strong style="color:#dc2626;">Overdue:</strong> {overdue_count} &nbsp;|&nbsp; '
        f'<strong style="color:#7c3aed;">P0 critical:</strong> {p0_count}'
        "</div>"
    )
    projects = "".join(_render_project(group, app_url, today) for group in groups)
    return (
        "<!DOCTYPE html>\n"
        '<html>\n<head><meta charset="UTF-8">'
        '<meta name="viewport" content="width=device-width,initial-scale=1"></head>\n'
        "<body style=\"font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,"
        'sans-serif;background:#f9fafb;margin:0;padding:0;">\n'
        '<div style="max-width:680px;margin:32px auto;background:#ffffff;border-radius:8px;'
        'overflow:hidden;box-shadow:0 1px 3px rgba(0,0,0,0.1);">'
        '<div style="background:#1d4ed8;padding:24px 32px;">'
        '<h1 style="color:#ffffff;margin:0;font-size:20px;font-weight:700;">TaskFlow</h1>'
        '<p style="color:#93c5fd;margin:4px 0 0;font-size:14px;">Outstanding Tasks Summary</p>'
        "</div>"
        f'<div style="padding:32px;">{summary}{projects}'
        '<div style="margin-top:32px;padding-top:24px;border-top:1px solid #e5e7eb;'
        'text-align:center;">'
        f'<a href="{e(app_url)}" style="display:inline-block;background:#2563eb;color:#ffffff;'
        'text-decoration:none;padding:10px 24px;border-radius:6px;font-weight:500;'
        'font-size:14px;">Open TaskFlow</a>'
        '<p style="margin:16px 0 0;font-size:12px;color:#9ca3af;">'
        f"Sent to {e(recipient_email)} &middot; "
        f'<a href="{e(app_url)}/settings" style="color:{_MUTED};">Manage email settings</a>'
        "</p></div></div></div>\n</body>\n</html>\n"
    )

