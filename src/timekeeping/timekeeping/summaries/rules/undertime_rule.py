from __future__ import annotations

from typing import Any

from ...common.datetime_utils import round_half_up, whole_minutes_between
from ..model import DailyAttendanceSummary
from .base import ScheduledWindow, SummaryRule


class UndertimeRule(SummaryRule):
    """Worked hours below (scheduled span - break) hours."""

    def evaluate(self, summary: DailyAttendanceSummary, window: ScheduledWindow) -> dict[str, Any]:
        if summary.total_hours_worked is None or window.start is None or window.end is None:
            return {}

        scheduled_minutes = whole_minutes_between(window.start, window.end) - int(summary.break_minutes or 0)
        scheduled_hours = scheduled_minutes / 60
        worked_hours = float(summary.total_hours_worked)
        if worked_hours >= scheduled_hours:
            return {}

        return {
            "is_undertime": True,
            "undertime_minutes": int(round_half_up((scheduled_hours - worked_hours) * 60)),
        }
