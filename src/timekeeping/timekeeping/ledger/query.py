from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..common.validators import require_positive_int
from ..core.exceptions import NotFoundError
from ..events.model import AttendanceEvent
from ..events.repository import AttendanceEventRepository
from .model import LedgerFilter, LedgerRecord
from .repository import LedgerRepository

DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100


@dataclass(frozen=True)
class LedgerPage:
    records: tuple[LedgerRecord, ...]
    page: int
    per_page: int
    total: int

    @property
    def last_page(self) -> int:
        return max(math.ceil(self.total / self.per_page), 1)


@dataclass(frozen=True)
class LedgerEventDetail:
    record: LedgerRecord
    attendance_event: Optional[AttendanceEvent] = None
    previous: Optional[LedgerRecord] = None
    next: Optional[LedgerRecord] = None
    # other scans of the same identity token on the same day
    same_day: tuple[LedgerRecord, ...] = ()


class LedgerQueryService:
    """Read-only browsing of the ledger for HR review."""

    def __init__(self, ledger: LedgerRepository, events: AttendanceEventRepository):
        self._ledger = ledger
        self._events = events

    def search(
        self,
        criteria: Optional[LedgerFilter] = None,
        *,
        page: int = 1,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> LedgerPage:
        criteria = criteria or LedgerFilter()
        page = require_positive_int(page, "page")
        per_page = min(require_positive_int(per_page, "per_page"), MAX_PER_PAGE)

        records = self._ledger.search(criteria=criteria, limit=per_page, offset=(page - 1) * per_page)
        return LedgerPage(
            records=tuple(records),
            page=page,
            per_page=per_page,
            total=self._ledger.count(criteria=criteria),
        )

    def detail(self, sequence_id: int) -> LedgerEventDetail:
        record = self._ledger.get_by_sequence(sequence_id)
        if not record:
            raise NotFoundError(f"Ledger event {sequence_id} not found")

        event_id = self._events.find_ids_by_ledger_sequence(sequence_ids=[sequence_id]).get(sequence_id)
        following = self._ledger.list_after(after_sequence_id=sequence_id, limit=1)

        scanned_on = record.scan_timestamp.date()
        same_day = self._ledger.search(
            criteria=LedgerFilter(identity_token=record.identity_token, date_from=scanned_on, date_to=scanned_on),
            limit=MAX_PER_PAGE,
            offset=0,
        )

        return LedgerEventDetail(
            record=record,
            attendance_event=self._events.get_by_id(event_id) if event_id is not None else None,
            previous=self._ledger.get_before(before_sequence_id=sequence_id),
            next=following[0] if following else None,
            same_day=tuple(sorted((r for r in same_day if r.sequence_id != sequence_id), key=lambda r: r.sequence_id)),
        )
