from __future__ import annotations

from datetime import date, datetime
from typing import Mapping, Optional, Protocol, Sequence

from .model import AttendanceEvent, NewAttendanceEvent


class AttendanceEventRepository(Protocol):
    def find_ids_by_ledger_sequence(self, *, sequence_ids: Sequence[int]) -> Mapping[int, int]:
        """Map ledger sequence_id -> event_id for rows already materialized."""

        raise NotImplementedError

    def create(self, event: NewAttendanceEvent) -> int:
        """Insert an event and return its id.

        Raises DuplicateEventError when `ledger_sequence_id` is already taken.
        """

        raise NotImplementedError

    def get_by_id(self, event_id: int) -> Optional[AttendanceEvent]:
        raise NotImplementedError

    def list_for_employee_and_date(self, *, employee_id: int, event_date: date) -> Sequence[AttendanceEvent]:
        """Events of one day ordered by event_time ascending."""

        raise NotImplementedError

    def apply_correction(
        self,
        *,
        event_id: int,
        event_time: datetime,
        original_time: datetime,
        reason: str,
        corrected_by: Optional[int],
        corrected_at: datetime,
    ) -> bool:
        raise NotImplementedError
