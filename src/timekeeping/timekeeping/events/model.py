from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import EventKind, EventSource


@dataclass(frozen=True)
class AttendanceEvent:
    """Thực thể miền (domain): sự kiện chấm công đã được vật chất hoá từ ledger.

    `ledger_sequence_id` is unique when present: at most one event per ledger row.
    Corrections are recorded in place through the correction fields; events are never deleted.
    """

    event_id: int
    employee_id: int
    event_date: date
    event_time: datetime
    event_kind: EventKind
    source: EventSource = EventSource.DEVICE
    ledger_sequence_id: Optional[int] = None
    is_deduplicated: bool = False
    hash_verified: bool = False
    device_id: Optional[str] = None
    ledger_raw_payload: Any = None
    notes: Optional[str] = None
    is_corrected: bool = False
    original_time: Optional[datetime] = None
    correction_reason: Optional[str] = None
    corrected_by: Optional[int] = None
    corrected_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewAttendanceEvent:
    """Insert payload (no id yet)."""

    employee_id: int
    event_date: date
    event_time: datetime
    event_kind: EventKind
    source: EventSource
    ledger_sequence_id: Optional[int] = None
    is_deduplicated: bool = False
    hash_verified: bool = False
    device_id: Optional[str] = None
    ledger_raw_payload: Any = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
