from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import Clock, now_local
from ..core.enums import EventSource
from ..core.exceptions import DuplicateEventError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..ledger.hashing import verify_record_hash
from ..ledger.model import LedgerRecord
from ..ledger.pipeline import BatchStats, ProcessingPipeline
from ..summaries.service import AttendanceSummaryService
from .model import NewAttendanceEvent
from .repository import AttendanceEventRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaterializationResult:
    stats: BatchStats = field(default_factory=BatchStats)
    created: int = 0
    conflicts: int = 0
    unmatched: int = 0
    marked: int = 0
    affected_days: tuple[tuple[int, date], ...] = ()
    last_sequence_id: Optional[int] = None


class LedgerEventMaterializer:
    """Turns a prepared ledger batch into attendance events, then acknowledges it.

    Rows are marked processed only after every insert and the summary rebuild
    went through, so a crash re-delivers the batch. Re-delivered rows resolve to
    their existing events and their days are rebuilt again.

    Rows whose identity token matches no active employee are left unprocessed;
    they surface as stale in the health check and materialize on a later run
    once the employee is enrolled.
    """

    def __init__(
        self,
        pipeline: ProcessingPipeline,
        events: AttendanceEventRepository,
        employees: EmployeeRepository,
        *,
        summaries: Optional[AttendanceSummaryService] = None,
        clock: Clock = now_local,
    ):
        self._pipeline = pipeline
        self._events = events
        self._employees = employees
        self._summaries = summaries
        self._clock = clock

    def run(
        self,
        limit: Optional[int] = None,
        *,
        from_sequence_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> MaterializationResult:
        batch = self._pipeline.prepare(limit, from_sequence_id=from_sequence_id)
        if batch.is_empty:
            return MaterializationResult()

        created = conflicts = 0
        affected: set[tuple[int, date]] = set()
        held: set[int] = set()

        for item in batch.events:
            if item.is_deduplicated:
                continue
            if item.is_already_processed:
                existing = self._events.get_by_id(item.existing_event_id)
                if existing:
                    affected.add((existing.employee_id, existing.event_date))
                continue

            record = item.original
            employee = self._resolve_employee(record)
            if not employee:
                held.add(record.sequence_id)
                continue

            affected.add((employee.employee_id, record.scan_timestamp.date()))
            try:
                self._events.create(self._to_new_event(record, employee))
            except DuplicateEventError:
                logger.warning("Ledger seq %s already materialized by another consumer; skipping", record.sequence_id)
                conflicts += 1
                continue
            created += 1

        if self._summaries and affected:
            self._summaries.recompute_many(affected, now=now)

        marked = self._pipeline.mark_processed(batch, processed_at=now or self._clock(), hold=held)
        unmatched = len(held)

        logger.info(
            "Materialized ledger batch: created=%s conflicts=%s unmatched=%s marked=%s",
            created,
            conflicts,
            unmatched,
            marked,
        )
        return MaterializationResult(
            stats=batch.stats,
            created=created,
            conflicts=conflicts,
            unmatched=unmatched,
            marked=marked,
            affected_days=tuple(sorted(affected)),
            last_sequence_id=batch.last_sequence_id,
        )

    def _resolve_employee(self, record: LedgerRecord) -> Optional[Employee]:
        employee = self._employees.get_by_identity_token(record.identity_token)
        if not employee or not employee.is_active:
            logger.warning(
                "Ledger seq %s: identity token %r matches no active employee",
                record.sequence_id,
                record.identity_token,
            )
            return None
        return employee

    @staticmethod
    def _to_new_event(record: LedgerRecord, employee: Employee) -> NewAttendanceEvent:
        return NewAttendanceEvent(
            employee_id=employee.employee_id,
            event_date=record.scan_timestamp.date(),
            event_time=record.scan_timestamp,
            event_kind=record.event_kind,
            source=EventSource.DEVICE,
            ledger_sequence_id=record.sequence_id,
            is_deduplicated=False,
            hash_verified=verify_record_hash(record),
            device_id=record.device_id,
            ledger_raw_payload=record.raw_payload,
        )
