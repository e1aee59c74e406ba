"""Task analysis: time windows, priorities and dependencies per optimization call."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Sequence
from zoneinfo import ZoneInfo

from ...config import settings
from ...models.domain import Location, Task, Urgency, localize
from .models import TaskAnalysis, TimeWindow

DEFAULT_PRIORITY = 3

URGENCY_RANKS: dict[Urgency, int] = {
    Urgency.CRITICAL: 1,
    Urgency.EMERGENCY: 1,
    Urgency.URGENT: 2,
    Urgency.HIGH: 2,
    Urgency.MEDIUM: 3,
    Urgency.NORMAL: 3,
    Urgency.LOW: 4,
}

logger = logging.getLogger(__name__)


def priority_rank(urgency: Urgency | None) -> int:
    if urgency is None:
        return DEFAULT_PRIORITY
    return URGENCY_RANKS[urgency]


def _category(task: Task) -> str:
    return (task.category or "").strip().lower()


class TaskAnalyzer:
    def __init__(self, tz: str | None = None) -> None:
        self.tz = ZoneInfo(tz or settings.timezone)

    def time_window_for(self, task: Task) -> TimeWindow | None:
        if task.due_date is None:
            return None
        due = localize(task.due_date, self.tz)
        start_of_day = datetime(due.year, due.month, due.day, tzinfo=self.tz)
        return TimeWindow(
            earliest_start=start_of_day,
            latest_end=start_of_day + timedelta(days=1),
            preferred_time=localize(task.scheduled_date, self.tz) if task.scheduled_date else None,
        )

    def analyze(self, tasks: Sequence[Task], locations: Sequence[Location]) -> TaskAnalysis:
        """Collapse the task list into per-location windows and priorities.

        A location with several tasks keeps its most urgent rank and the window
        that closes first. Dependencies stay task-level: every maintenance task
        depends on each inspection at the same location.
        """
        known_ids = {location.id for location in locations}
        analysis = TaskAnalysis()

        for task in tasks:
            if task.building_id not in known_ids:
                logger.debug(f"Task {task.id} references unknown location {task.building_id}, ignoring")
                continue

            window = self.time_window_for(task)
            if window is not None:
                current = analysis.time_windows.get(task.building_id)
                if current is None or window.latest_end < current.latest_end:
                    analysis.time_windows[task.building_id] = window

            rank = priority_rank(task.urgency)
            analysis.priorities[task.building_id] = min(rank, analysis.priorities.get(task.building_id, rank))

            if _category(task) == "inspection":
                for other in tasks:
                    if other.id != task.id and other.building_id == task.building_id and _category(other) == "maintenance":
                        analysis.dependencies.setdefault(other.id, set()).add(task.id)

        return analysis
