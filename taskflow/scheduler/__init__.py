"""Email schedules — model, persistence, evaluation, and the periodic runner."""

from taskflow.scheduler.engine import SchedulerEngine
from taskflow.scheduler.evaluator import FIRE_WINDOW, Decision, evaluate, fire_window
from taskflow.scheduler.models import Cadence, Schedule, ScheduleConfigError, ScheduleSettings
from taskflow.scheduler.runner import RunSummary, ScheduleRunner
from taskflow.scheduler.store import ScheduleStore

__all__ = [
    "FIRE_WINDOW",
    "Cadence",
    "Decision",
    "RunSummary",
    "Schedule",
    "ScheduleConfigError",
    "ScheduleRunner",
    "ScheduleSettings",
    "ScheduleStore",
    "SchedulerEngine",
    "evaluate",
    "fire_window",
]
