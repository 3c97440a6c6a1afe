from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Optional

from ..common.datetime_utils import Clock, now_local
from ..core.exceptions import NotFoundError
from ..schedules.repository import WorkScheduleRepository
from .calculator import AttendanceSummaryComputer
from .engine import BusinessRuleEngine
from .model import DailyAttendanceSummary
from .repository import DailySummaryRepository

logger = logging.getLogger(__name__)


class AttendanceSummaryService:
    """Use case: compute, classify and persist daily attendance summaries."""

    def __init__(
        self,
        computer: AttendanceSummaryComputer,
        engine: BusinessRuleEngine,
        summaries: DailySummaryRepository,
        schedules: WorkScheduleRepository,
        *,
        clock: Clock = now_local,
    ):
        self._computer = computer
        self._engine = engine
        self._summaries = summaries
        self._schedules = schedules
        self._clock = clock

    def apply_rules(self, summary: DailyAttendanceSummary, on_date: Optional[date] = None) -> DailyAttendanceSummary:
        """Run the rule engine, resolving the scheduled window when the summary lacks one."""

        if summary.scheduled_start is not None and summary.scheduled_end is not None:
            return self._engine.apply_rules(summary)

        on_date = on_date or summary.attendance_date
        schedule = None
        if summary.work_schedule_id is not None:
            schedule = self._schedules.get_by_id(summary.work_schedule_id)
        else:
            try:
                schedule = self._computer.resolve_schedule(employee_id=summary.employee_id, on_date=on_date)
            except NotFoundError:
                schedule = None

        start, end = schedule.scheduled_bounds(on_date) if schedule else (None, None)
        return self._engine.apply_rules(summary, scheduled_start=start, scheduled_end=end)

    def evaluate(self, employee_id: int, on_date: date) -> DailyAttendanceSummary:
        """Compute + classify without persisting."""

        return self._engine.apply_rules(self._computer.compute_daily_summary(employee_id, on_date))

    def recompute(self, employee_id: int, on_date: date, *, now: Optional[datetime] = None) -> DailyAttendanceSummary:
        existing = self._summaries.get(employee_id=employee_id, attendance_date=on_date)
        if existing and existing.is_finalized:
            logger.info("Summary for employee %s on %s is finalized; skipping recompute", employee_id, on_date)
            return existing

        summary = replace(self.evaluate(employee_id, on_date), calculated_at=now or self._clock())
        self._summaries.upsert(summary)
        return summary

    def recompute_many(
        self, days: Iterable[tuple[int, date]], *, now: Optional[datetime] = None
    ) -> list[DailyAttendanceSummary]:
        now = now or self._clock()
        return [self.recompute(employee_id, on_date, now=now) for employee_id, on_date in sorted(set(days))]

    def get(self, employee_id: int, on_date: date) -> Optional[DailyAttendanceSummary]:
        return self._summaries.get(employee_id=employee_id, attendance_date=on_date)

    def finalize(self, employee_id: int, on_date: date) -> DailyAttendanceSummary:
        """Payroll lock: compute the row first if it was never stored, then lock it."""

        existing = self._summaries.get(employee_id=employee_id, attendance_date=on_date)
        if existing and existing.is_finalized:
            return existing
        if not existing:
            existing = self.recompute(employee_id, on_date)

        self._summaries.finalize(employee_id=employee_id, attendance_date=on_date)
        return replace(existing, is_finalized=True)
