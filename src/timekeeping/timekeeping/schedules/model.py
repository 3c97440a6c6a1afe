from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Mapping, Optional

from ..core.enums import Weekday


@dataclass(frozen=True)
class DayWindow:
    """Scheduled start/end for one weekday."""

    start: time
    end: time

    def bounds(self, on_date: date) -> tuple[datetime, datetime]:
        start = datetime.combine(on_date, self.start)
        end = datetime.combine(on_date, self.end)
        if end <= start:
            # Night shift: ends on the following day.
            end += timedelta(days=1)
        return start, end

    def minutes(self) -> int:
        start, end = self.bounds(date.min)
        return int((end - start).total_seconds() // 60)


@dataclass(frozen=True)
class WorkSchedule:
    """Thực thể miền (domain): lịch làm việc theo đơn vị tổ chức, có hiệu lực theo khoảng ngày.

    Several versions may exist per department; the one with the latest
    `effective_from` <= target date that has not expired applies.
    """

    schedule_id: int
    department_id: int
    name: str
    effective_from: date
    expires_at: Optional[date] = None
    windows: Mapping[Weekday, DayWindow] = field(default_factory=dict)

    def is_effective_on(self, on_date: date) -> bool:
        if self.effective_from > on_date:
            return False
        return self.expires_at is None or self.expires_at >= on_date

    def window_for(self, on_date: date) -> Optional[DayWindow]:
        return self.windows.get(Weekday(on_date.weekday()))

    def scheduled_bounds(self, on_date: date) -> tuple[Optional[datetime], Optional[datetime]]:
        window = self.window_for(on_date)
        if not window:
            return None, None
        return window.bounds(on_date)
