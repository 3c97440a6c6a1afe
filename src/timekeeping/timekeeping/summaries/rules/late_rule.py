from __future__ import annotations

from datetime import timedelta
from typing import Any

from ...common.datetime_utils import whole_minutes_between
from ...core.constants import DEFAULT_GRACE_PERIOD_MINUTES
from ..model import DailyAttendanceSummary
from .base import ScheduledWindow, SummaryRule


class LateRule(SummaryRule):
    """Late when time-in is strictly after scheduled start + grace."""

    def __init__(self, grace_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES):
        self._grace_minutes = int(grace_minutes)

    def evaluate(self, summary: DailyAttendanceSummary, window: ScheduledWindow) -> dict[str, Any]:
        if summary.time_in is None or window.start is None:
            return {}

        grace_deadline = window.start + timedelta(minutes=self._grace_minutes)
        if summary.time_in <= grace_deadline:
            return {}

        minutes_after_start = whole_minutes_between(window.start, summary.time_in)
        return {
            "is_late": True,
            "late_minutes": max(0, minutes_after_start - self._grace_minutes),
        }
