"""Review scheduling engine (interval table, scheduler, due detection, goals)."""

from .due import due_sessions, is_due, newly_due, sort_by_next_review, was_notified
from .goals import daily_counts, daily_progress, goal_progress, start_of_day
from .intervals import EBBINGHAUS_INTERVALS, IntervalTable
from .scheduler import complete_review, stage_of, start_session

__all__ = [
    "EBBINGHAUS_INTERVALS",
    "IntervalTable",
    "complete_review",
    "daily_counts",
    "daily_progress",
    "due_sessions",
    "goal_progress",
    "is_due",
    "newly_due",
    "sort_by_next_review",
    "stage_of",
    "start_of_day",
    "was_notified",
]
