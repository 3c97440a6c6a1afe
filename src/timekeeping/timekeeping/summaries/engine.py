from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..core.constants import DEFAULT_GRACE_PERIOD_MINUTES, DEFAULT_OVERTIME_THRESHOLD_MINUTES
from .model import DailyAttendanceSummary
from .rules.base import ScheduledWindow, SummaryRule
from .rules.late_rule import LateRule
from .rules.overtime_rule import OvertimeRule
from .rules.undertime_rule import UndertimeRule


def default_rules(
    *,
    grace_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES,
    overtime_threshold_minutes: int = DEFAULT_OVERTIME_THRESHOLD_MINUTES,
) -> list[SummaryRule]:
    return [
        LateRule(grace_minutes),
        UndertimeRule(),
        OvertimeRule(overtime_threshold_minutes),
    ]


class BusinessRuleEngine:
    """Classifies a computed summary into presence/late/undertime/overtime flags.

    Pure: no clock and no I/O. Rules are independent of each other; absent days
    short-circuit before any rule runs.
    """

    def __init__(self, rules: Optional[Sequence[SummaryRule]] = None):
        self._rules = list(rules) if rules is not None else default_rules()

    def apply_rules(
        self,
        summary: DailyAttendanceSummary,
        *,
        scheduled_start: Optional[datetime] = None,
        scheduled_end: Optional[datetime] = None,
    ) -> DailyAttendanceSummary:
        window = ScheduledWindow(
            start=scheduled_start or summary.scheduled_start,
            end=scheduled_end or summary.scheduled_end,
        )

        result = replace(
            summary,
            scheduled_start=window.start,
            scheduled_end=window.end,
            is_present=False,
            is_late=False,
            is_undertime=False,
            is_overtime=False,
            late_minutes=None,
            undertime_minutes=None,
        )

        if result.time_in is None:
            return result

        result = replace(result, is_present=True)
        changes: dict = {}
        for rule in self._rules:
            changes.update(rule.evaluate(result, window))
        return replace(result, **changes) if changes else result
