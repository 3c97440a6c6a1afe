from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.enums import Weekday
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import DayWindow, WorkSchedule
from .repository import WorkScheduleRepository

_DAY_COLUMNS: dict[Weekday, tuple[str, str]] = {
    Weekday.MONDAY: ("monday_start", "monday_end"),
    Weekday.TUESDAY: ("tuesday_start", "tuesday_end"),
    Weekday.WEDNESDAY: ("wednesday_start", "wednesday_end"),
    Weekday.THURSDAY: ("thursday_start", "thursday_end"),
    Weekday.FRIDAY: ("friday_start", "friday_end"),
    Weekday.SATURDAY: ("saturday_start", "saturday_end"),
    Weekday.SUNDAY: ("sunday_start", "sunday_end"),
}

_COLUMNS = ", ".join(
    ["schedule_id", "department_id", "name", "effective_from", "expires_at"]
    + [col for pair in _DAY_COLUMNS.values() for col in pair]
)


def _to_schedule(r: dict) -> WorkSchedule:
    windows: dict[Weekday, DayWindow] = {}
    for day, (start_col, end_col) in _DAY_COLUMNS.items():
        start = normalize_mysql_time(r.get(start_col))
        end = normalize_mysql_time(r.get(end_col))
        if start is not None and end is not None:
            windows[day] = DayWindow(start=start, end=end)

    return WorkSchedule(
        schedule_id=int(r["schedule_id"]),
        department_id=int(r["department_id"]),
        name=r.get("name") or "",
        effective_from=r["effective_from"],
        expires_at=r.get("expires_at"),
        windows=windows,
    )


class MySQLWorkScheduleRepository(WorkScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, schedule_id: int) -> Optional[WorkSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_schedules WHERE schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return _to_schedule(r) if r else None

    def find_effective(self, *, department_id: int, on_date: date) -> Optional[WorkSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM work_schedules
                WHERE department_id=%s
                  AND effective_from <= %s
                  AND (expires_at IS NULL OR expires_at >= %s)
                ORDER BY effective_from DESC, schedule_id DESC
                LIMIT 1
                """,
                (int(department_id), on_date, on_date),
            )
            r = fetchone(cur)
            return _to_schedule(r) if r else None
