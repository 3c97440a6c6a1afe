from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import round_half_up, whole_minutes_between
from ..core.enums import EventKind
from ..core.exceptions import NotFoundError
from ..employees.repository import EmployeeRepository
from ..events.model import AttendanceEvent
from ..events.repository import AttendanceEventRepository
from ..schedules.model import WorkSchedule
from ..schedules.repository import WorkScheduleRepository
from .model import DailyAttendanceSummary, absent_summary


def first_time_in(events: Sequence[AttendanceEvent]) -> Optional[datetime]:
    for e in events:
        if e.event_kind == EventKind.TIME_IN:
            return e.event_time
    return None


def last_time_out(events: Sequence[AttendanceEvent]) -> Optional[datetime]:
    for e in reversed(events):
        if e.event_kind == EventKind.TIME_OUT:
            return e.event_time
    return None


def break_minutes(events: Sequence[AttendanceEvent]) -> int:
    """Sum of (break_end - preceding break_start); an unmatched break_start adds nothing."""

    total = 0
    started: Optional[datetime] = None
    for e in events:
        if e.event_kind == EventKind.BREAK_START:
            started = e.event_time
        elif e.event_kind == EventKind.BREAK_END and started is not None:
            total += whole_minutes_between(started, e.event_time)
            started = None
    return total


class AttendanceSummaryComputer:
    """Reduces one day of attendance events plus the work schedule into raw time metrics."""

    def __init__(
        self,
        employees: EmployeeRepository,
        schedules: WorkScheduleRepository,
        events: AttendanceEventRepository,
    ):
        self._employees = employees
        self._schedules = schedules
        self._events = events

    def resolve_schedule(self, *, employee_id: int, on_date: date) -> Optional[WorkSchedule]:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        if employee.department_id is None:
            return None
        return self._schedules.find_effective(department_id=employee.department_id, on_date=on_date)

    def compute_daily_summary(self, employee_id: int, on_date: date) -> DailyAttendanceSummary:
        schedule = self.resolve_schedule(employee_id=employee_id, on_date=on_date)
        if not schedule:
            return absent_summary(employee_id, on_date)

        scheduled_start, scheduled_end = schedule.scheduled_bounds(on_date)

        events = sorted(
            self._events.list_for_employee_and_date(employee_id=employee_id, event_date=on_date),
            key=lambda e: e.event_time,
        )
        if not events:
            return absent_summary(
                employee_id,
                on_date,
                work_schedule_id=schedule.schedule_id,
                scheduled_start=scheduled_start,
                scheduled_end=scheduled_end,
            )

        time_in = first_time_in(events)
        time_out = last_time_out(events)
        break_total = break_minutes(events)

        total_hours = regular_hours = overtime_hours = None
        if time_in and time_out:
            # order-insensitive: a time_out earlier than time_in still counts the span
            worked = (whole_minutes_between(time_in, time_out) - break_total) / 60
            scheduled = 0.0
            if scheduled_start and scheduled_end:
                scheduled = whole_minutes_between(scheduled_start, scheduled_end) / 60 - break_total / 60

            total_hours = round_half_up(worked, 2)
            if worked > scheduled:
                regular_hours = round_half_up(scheduled, 2)
                overtime_hours = round_half_up(worked - scheduled, 2)
            else:
                regular_hours = total_hours
                overtime_hours = 0.0

        ledger_linked = [e for e in events if e.ledger_sequence_id is not None]
        sequence_ids = [e.ledger_sequence_id for e in ledger_linked]

        return DailyAttendanceSummary(
            employee_id=employee_id,
            attendance_date=on_date,
            work_schedule_id=schedule.schedule_id,
            scheduled_start=scheduled_start,
            scheduled_end=scheduled_end,
            time_in=time_in,
            time_out=time_out,
            break_minutes=break_total,
            total_hours_worked=total_hours,
            regular_hours=regular_hours,
            overtime_hours=overtime_hours,
            ledger_sequence_start=min(sequence_ids) if sequence_ids else None,
            ledger_sequence_end=max(sequence_ids) if sequence_ids else None,
            ledger_verified=all(e.hash_verified for e in ledger_linked),
        )
