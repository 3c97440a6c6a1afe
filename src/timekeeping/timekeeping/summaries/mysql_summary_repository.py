from __future__ import annotations

from datetime import date
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import DailyAttendanceSummary
from .repository import DailySummaryRepository

_WRITABLE = (
    "work_schedule_id",
    "scheduled_start",
    "scheduled_end",
    "time_in",
    "time_out",
    "break_minutes",
    "total_hours_worked",
    "regular_hours",
    "overtime_hours",
    "is_present",
    "is_late",
    "is_undertime",
    "is_overtime",
    "late_minutes",
    "undertime_minutes",
    "ledger_sequence_start",
    "ledger_sequence_end",
    "ledger_verified",
    "calculated_at",
)

_SELECT = ", ".join(("employee_id", "attendance_date") + _WRITABLE + ("is_finalized",))


def _optional_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def _to_summary(r: dict) -> DailyAttendanceSummary:
    return DailyAttendanceSummary(
        employee_id=int(r["employee_id"]),
        attendance_date=r["attendance_date"],
        work_schedule_id=r.get("work_schedule_id"),
        scheduled_start=r.get("scheduled_start"),
        scheduled_end=r.get("scheduled_end"),
        time_in=r.get("time_in"),
        time_out=r.get("time_out"),
        break_minutes=int(r.get("break_minutes") or 0),
        total_hours_worked=_optional_float(r.get("total_hours_worked")),
        regular_hours=_optional_float(r.get("regular_hours")),
        overtime_hours=_optional_float(r.get("overtime_hours")),
        is_present=bool(r.get("is_present")),
        is_late=bool(r.get("is_late")),
        is_undertime=bool(r.get("is_undertime")),
        is_overtime=bool(r.get("is_overtime")),
        late_minutes=r.get("late_minutes"),
        undertime_minutes=r.get("undertime_minutes"),
        ledger_sequence_start=r.get("ledger_sequence_start"),
        ledger_sequence_end=r.get("ledger_sequence_end"),
        ledger_verified=bool(r.get("ledger_verified", True)),
        is_finalized=bool(r.get("is_finalized")),
        calculated_at=r.get("calculated_at"),
    )


class MySQLDailySummaryRepository(DailySummaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, employee_id: int, attendance_date: date) -> Optional[DailyAttendanceSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SELECT}
                FROM daily_attendance_summaries
                WHERE employee_id=%s AND attendance_date=%s
                """,
                (int(employee_id), attendance_date),
            )
            r = fetchone(cur)
            return _to_summary(r) if r else None

    def upsert(self, summary: DailyAttendanceSummary) -> bool:
        columns = ("employee_id", "attendance_date") + _WRITABLE
        values = [getattr(summary, c) for c in columns]
        # A finalized row keeps every stored value. The row alias needs MySQL 8.0.19+.
        updates = ", ".join(f"{c}=IF(is_finalized, {c}, new.{c})" for c in _WRITABLE)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO daily_attendance_summaries({", ".join(columns)})
                VALUES({", ".join(["%s"] * len(columns))}) AS new
                ON DUPLICATE KEY UPDATE {updates}
                """,
                tuple(values),
            )
            return cur.rowcount > 0

    def finalize(self, *, employee_id: int, attendance_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE daily_attendance_summaries
                SET is_finalized=1
                WHERE employee_id=%s AND attendance_date=%s
                """,
                (int(employee_id), attendance_date),
            )
            return cur.rowcount > 0
