from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import Clock, now_local
from ..common.validators import require_non_empty
from ..core.enums import EventKind, EventSource
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import AttendanceEvent, NewAttendanceEvent
from .repository import AttendanceEventRepository


class AttendanceEventService:
    """Manual entries and corrections. Events are corrected in place, never deleted."""

    def __init__(self, events: AttendanceEventRepository, employees: EmployeeRepository, *, clock: Clock = now_local):
        self._events = events
        self._employees = employees
        self._clock = clock

    def get(self, event_id: int) -> AttendanceEvent:
        event = self._events.get_by_id(event_id)
        if not event:
            raise NotFoundError(f"Attendance event {event_id} not found")
        return event

    def record_manual_event(
        self,
        *,
        employee_id: int,
        event_time: datetime,
        event_kind: EventKind,
        created_by: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> int:
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError(f"Employee {employee_id} not found")

        return self._events.create(
            NewAttendanceEvent(
                employee_id=int(employee_id),
                event_date=event_time.date(),
                event_time=event_time,
                event_kind=EventKind(event_kind),
                source=EventSource.MANUAL,
                notes=(notes or "").strip() or None,
                created_by=created_by,
            )
        )

    def correct_event(
        self,
        *,
        event_id: int,
        new_time: datetime,
        reason: str,
        corrected_by: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceEvent:
        reason = require_non_empty(reason, "Correction reason")

        event = self._events.get_by_id(event_id)
        if not event:
            raise NotFoundError(f"Attendance event {event_id} not found")
        if new_time.date() != event.event_date and event.ledger_sequence_id is not None:
            raise ValidationError("A ledger event cannot be moved to another day")

        self._events.apply_correction(
            event_id=event.event_id,
            event_time=new_time,
            original_time=event.original_time or event.event_time,
            reason=reason,
            corrected_by=corrected_by,
            corrected_at=now or self._clock(),
        )
        corrected = self._events.get_by_id(event_id)
        if not corrected:
            raise NotFoundError(f"Attendance event {event_id} not found")
        return corrected
