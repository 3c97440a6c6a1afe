from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import WorkSchedule


class WorkScheduleRepository(Protocol):
    def get_by_id(self, schedule_id: int) -> Optional[WorkSchedule]:
        raise NotImplementedError

    def find_effective(self, *, department_id: int, on_date: date) -> Optional[WorkSchedule]:
        """Latest `effective_from` <= on_date whose `expires_at` is null or >= on_date."""

        raise NotImplementedError
