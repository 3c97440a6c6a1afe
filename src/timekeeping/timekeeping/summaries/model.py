from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class DailyAttendanceSummary:
    """Thực thể miền (domain): tổng hợp chấm công một nhân viên trong một ngày.

    Hours fields stay None on an open day (time-in without time-out). A finalized
    row is locked against recomputation.
    """

    employee_id: int
    attendance_date: date
    work_schedule_id: Optional[int] = None
    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    break_minutes: int = 0
    total_hours_worked: Optional[float] = None
    regular_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    is_present: bool = False
    is_late: bool = False
    is_undertime: bool = False
    is_overtime: bool = False
    late_minutes: Optional[int] = None
    undertime_minutes: Optional[int] = None
    ledger_sequence_start: Optional[int] = None
    ledger_sequence_end: Optional[int] = None
    ledger_verified: bool = True
    is_finalized: bool = False
    calculated_at: Optional[datetime] = None

    @property
    def attendance_status(self) -> AttendanceStatus:
        if not self.is_present:
            return AttendanceStatus.ABSENT
        if self.is_late:
            return AttendanceStatus.LATE
        if self.is_undertime:
            return AttendanceStatus.UNDERTIME
        if self.is_overtime:
            return AttendanceStatus.OVERTIME
        return AttendanceStatus.PRESENT


def absent_summary(
    employee_id: int,
    attendance_date: date,
    *,
    work_schedule_id: Optional[int] = None,
    scheduled_start: Optional[datetime] = None,
    scheduled_end: Optional[datetime] = None,
) -> DailyAttendanceSummary:
    """Stub for days without a schedule or without any events."""

    return DailyAttendanceSummary(
        employee_id=employee_id,
        attendance_date=attendance_date,
        work_schedule_id=work_schedule_id,
        scheduled_start=scheduled_start,
        scheduled_end=scheduled_end,
        break_minutes=0,
        total_hours_worked=0.0,
        regular_hours=0.0,
        overtime_hours=0.0,
    )
