from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import DailyAttendanceSummary


class DailySummaryRepository(Protocol):
    def get(self, *, employee_id: int, attendance_date: date) -> Optional[DailyAttendanceSummary]:
        raise NotImplementedError

    def upsert(self, summary: DailyAttendanceSummary) -> bool:
        """Insert or update the (employee, date) row. Finalized rows are left untouched."""

        raise NotImplementedError

    def finalize(self, *, employee_id: int, attendance_date: date) -> bool:
        raise NotImplementedError
