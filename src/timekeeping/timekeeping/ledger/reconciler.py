from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from ..events.repository import AttendanceEventRepository
from .dedup import AnnotatedRecord


class ExistingEventReconciler:
    """Flags ledger rows that already have a materialized attendance event (read-only)."""

    def __init__(self, events: AttendanceEventRepository):
        self._events = events

    def reconcile(self, records: Sequence[AnnotatedRecord]) -> tuple[AnnotatedRecord, ...]:
        if not records:
            return ()

        existing = self._events.find_ids_by_ledger_sequence(
            sequence_ids=[r.sequence_id for r in records],
        )
        return tuple(
            replace(r, existing_event_id=existing[r.sequence_id]) if r.sequence_id in existing else r
            for r in records
        )
