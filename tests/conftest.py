from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time, timedelta
from types import SimpleNamespace
from typing import Optional

import pytest

from src.timekeeping.timekeeping.container import build_services
from src.timekeeping.timekeeping.core.enums import EventKind, Weekday
from src.timekeeping.timekeeping.core.exceptions import DuplicateEventError
from src.timekeeping.timekeeping.core.settings import TimekeepingSettings
from src.timekeeping.timekeeping.employees.model import Employee
from src.timekeeping.timekeeping.events.model import AttendanceEvent
from src.timekeeping.timekeeping.ledger.hashing import compute_chain_hash
from src.timekeeping.timekeeping.ledger.model import LedgerFilter, LedgerRecord
from src.timekeeping.timekeeping.schedules.model import DayWindow, WorkSchedule

# 2025-01-06 is a Monday.
MONDAY = date(2025, 1, 6)


class InMemoryLedger:
    def __init__(self, records=()):
        self._rows: dict[int, LedgerRecord] = {r.sequence_id: r for r in records}

    def add(self, *records: LedgerRecord) -> None:
        for r in records:
            self._rows[r.sequence_id] = r

    def get(self, sequence_id: int) -> LedgerRecord:
        return self._rows[sequence_id]

    def _ordered(self):
        return [self._rows[k] for k in sorted(self._rows)]

    def list_unprocessed(self, *, limit: int, from_sequence_id: Optional[int] = None):
        rows = [r for r in self._ordered() if not r.processed]
        if from_sequence_id is not None:
            rows = [r for r in rows if r.sequence_id >= from_sequence_id]
        return rows[:limit]

    def list_after(self, *, after_sequence_id: Optional[int], limit: int):
        rows = self._ordered()
        if after_sequence_id is not None:
            rows = [r for r in rows if r.sequence_id > after_sequence_id]
        return rows[:limit]

    def mark_processed(self, *, sequence_ids, processed_at: datetime) -> int:
        updated = 0
        for seq in sequence_ids:
            row = self._rows.get(seq)
            if row and not row.processed:
                self._rows[seq] = replace(row, processed=True, processed_at=processed_at)
                updated += 1
        return updated

    def count_unprocessed(self, *, created_before: Optional[datetime] = None) -> int:
        rows = [r for r in self._rows.values() if not r.processed]
        if created_before is not None:
            rows = [r for r in rows if (r.created_at or r.scan_timestamp) < created_before]
        return len(rows)

    def get_latest(self) -> Optional[LedgerRecord]:
        rows = self._ordered()
        return rows[-1] if rows else None

    def get_by_sequence(self, sequence_id: int) -> Optional[LedgerRecord]:
        return self._rows.get(sequence_id)

    def get_before(self, *, before_sequence_id: int) -> Optional[LedgerRecord]:
        rows = [r for r in self._ordered() if r.sequence_id < before_sequence_id]
        return rows[-1] if rows else None

    def _matching(self, criteria: LedgerFilter):
        def keep(r: LedgerRecord) -> bool:
            scanned_on = r.scan_timestamp.date()
            return (
                criteria.identity_token in (None, r.identity_token)
                and criteria.device_id in (None, r.device_id)
                and criteria.event_kind in (None, r.event_kind)
                and (criteria.date_from is None or scanned_on >= criteria.date_from)
                and (criteria.date_to is None or scanned_on <= criteria.date_to)
            )

        return [r for r in reversed(self._ordered()) if keep(r)]

    def search(self, *, criteria: LedgerFilter, limit: int, offset: int):
        return self._matching(criteria)[offset : offset + limit]

    def count(self, *, criteria: LedgerFilter) -> int:
        return len(self._matching(criteria))


class InMemoryEvents:
    def __init__(self):
        self.rows: dict[int, AttendanceEvent] = {}
        self.created_by: dict[int, Optional[int]] = {}
        self._id = 0

    def find_ids_by_ledger_sequence(self, *, sequence_ids):
        wanted = set(sequence_ids)
        return {e.ledger_sequence_id: e.event_id for e in self.rows.values() if e.ledger_sequence_id in wanted}

    def create(self, event) -> int:
        taken = {e.ledger_sequence_id for e in self.rows.values()}
        if event.ledger_sequence_id is not None and event.ledger_sequence_id in taken:
            raise DuplicateEventError(event.ledger_sequence_id)

        self._id += 1
        self.rows[self._id] = AttendanceEvent(
            event_id=self._id,
            employee_id=event.employee_id,
            event_date=event.event_date,
            event_time=event.event_time,
            event_kind=event.event_kind,
            source=event.source,
            ledger_sequence_id=event.ledger_sequence_id,
            is_deduplicated=event.is_deduplicated,
            hash_verified=event.hash_verified,
            device_id=event.device_id,
            ledger_raw_payload=event.ledger_raw_payload,
            notes=event.notes,
        )
        self.created_by[self._id] = event.created_by
        return self._id

    def get_by_id(self, event_id: int) -> Optional[AttendanceEvent]:
        return self.rows.get(event_id)

    def list_for_employee_and_date(self, *, employee_id: int, event_date: date):
        items = [e for e in self.rows.values() if e.employee_id == employee_id and e.event_date == event_date]
        return sorted(items, key=lambda e: (e.event_time, e.event_id))

    def apply_correction(self, *, event_id, event_time, original_time, reason, corrected_by, corrected_at) -> bool:
        event = self.rows.get(event_id)
        if not event:
            return False
        self.rows[event_id] = replace(
            event,
            event_time=event_time,
            event_date=event_time.date(),
            is_corrected=True,
            original_time=event.original_time or original_time,
            correction_reason=reason,
            corrected_by=corrected_by,
            corrected_at=corrected_at,
        )
        return True


class InMemoryEmployees:
    def __init__(self, employees=()):
        self._by_id = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> None:
        self._by_id[employee.employee_id] = employee

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._by_id.get(employee_id)

    def get_by_identity_token(self, identity_token: str) -> Optional[Employee]:
        for e in self._by_id.values():
            if e.identity_token == identity_token:
                return e
        return None


class InMemorySchedules:
    def __init__(self, schedules=()):
        self._by_id = {s.schedule_id: s for s in schedules}

    def get_by_id(self, schedule_id: int) -> Optional[WorkSchedule]:
        return self._by_id.get(schedule_id)

    def find_effective(self, *, department_id: int, on_date: date) -> Optional[WorkSchedule]:
        candidates = [
            s for s in self._by_id.values() if s.department_id == department_id and s.is_effective_on(on_date)
        ]
        return max(candidates, key=lambda s: s.effective_from, default=None)


class InMemorySummaries:
    def __init__(self):
        self.rows = {}

    def get(self, *, employee_id: int, attendance_date: date):
        return self.rows.get((employee_id, attendance_date))

    def upsert(self, summary) -> bool:
        key = (summary.employee_id, summary.attendance_date)
        existing = self.rows.get(key)
        if existing and existing.is_finalized:
            return False
        self.rows[key] = replace(summary, is_finalized=False)
        return True

    def finalize(self, *, employee_id: int, attendance_date: date) -> bool:
        existing = self.rows.get((employee_id, attendance_date))
        if not existing:
            return False
        self.rows[(employee_id, attendance_date)] = replace(existing, is_finalized=True)
        return True


class InMemoryHealthLogs:
    def __init__(self):
        self.rows = []

    def append(self, log) -> int:
        log = replace(log, log_id=len(self.rows) + 1)
        self.rows.append(log)
        return log.log_id

    def list_recent(self, *, limit: int):
        return list(reversed(self.rows))[:limit]


def office_schedule(*, schedule_id: int = 1, department_id: int = 10) -> WorkSchedule:
    weekday_window = DayWindow(start=time(8, 0), end=time(17, 0))
    return WorkSchedule(
        schedule_id=schedule_id,
        department_id=department_id,
        name="Office hours",
        effective_from=date(2024, 1, 1),
        windows={day: weekday_window for day in Weekday if day < Weekday.SATURDAY},
    )


def chain_records(rows, *, start_sequence: int = 1, hash_previous: Optional[str] = None) -> list[LedgerRecord]:
    """Build correctly hash-chained ledger rows from (token, device, scanned_at, kind) tuples."""

    records = []
    for offset, (token, device, scanned_at, kind) in enumerate(rows):
        payload = {"token": token, "device": device, "at": scanned_at.isoformat(), "kind": EventKind(kind).value}
        digest = compute_chain_hash(hash_previous, payload)
        records.append(
            LedgerRecord(
                sequence_id=start_sequence + offset,
                identity_token=token,
                device_id=device,
                scan_timestamp=scanned_at,
                event_kind=EventKind(kind),
                raw_payload=payload,
                hash_chain=digest,
                hash_previous=hash_previous,
                created_at=scanned_at + timedelta(seconds=1),
            )
        )
        hash_previous = digest
    return records


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 1, 6, 18, 0, 0)


@pytest.fixture
def repos():
    return SimpleNamespace(
        ledger=InMemoryLedger(),
        events=InMemoryEvents(),
        employees=InMemoryEmployees(
            [
                Employee(employee_id=1, full_name="An Nguyen", department_id=10, identity_token="card-001"),
                Employee(employee_id=2, full_name="Binh Tran", department_id=10, identity_token="card-002"),
                Employee(employee_id=3, full_name="Chi Le", department_id=None, identity_token="card-003"),
                Employee(
                    employee_id=4, full_name="Dung Pham", department_id=10, identity_token="card-004", is_active=False
                ),
            ]
        ),
        schedules=InMemorySchedules([office_schedule()]),
        summaries=InMemorySummaries(),
        health=InMemoryHealthLogs(),
    )


@pytest.fixture
def container(repos, fixed_now):
    return build_services(
        settings=TimekeepingSettings(),
        ledger_repo=repos.ledger,
        events_repo=repos.events,
        employees_repo=repos.employees,
        schedules_repo=repos.schedules,
        summaries_repo=repos.summaries,
        health_repo=repos.health,
        clock=lambda: fixed_now,
    )


@pytest.fixture
def make_chain():
    return chain_records


@pytest.fixture
def monday() -> date:
    return MONDAY
