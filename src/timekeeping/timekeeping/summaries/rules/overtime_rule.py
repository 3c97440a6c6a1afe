from __future__ import annotations

from datetime import timedelta
from typing import Any

from ...core.constants import DEFAULT_OVERTIME_THRESHOLD_MINUTES
from ..model import DailyAttendanceSummary
from .base import ScheduledWindow, SummaryRule


class OvertimeRule(SummaryRule):
    def __init__(self, threshold_minutes: int = DEFAULT_OVERTIME_THRESHOLD_MINUTES):
        self._threshold_minutes = int(threshold_minutes)

    def evaluate(self, summary: DailyAttendanceSummary, window: ScheduledWindow) -> dict[str, Any]:
        if summary.time_out is None or window.end is None:
            return {}

        if summary.time_out > window.end + timedelta(minutes=self._threshold_minutes):
            return {"is_overtime": True}
        return {}
