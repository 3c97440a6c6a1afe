from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import Clock, now_local
from ..common.validators import require_positive_int
from ..core.constants import DEFAULT_POLL_BATCH_SIZE, DEFAULT_STALE_AFTER_MINUTES
from .model import LedgerRecord, LedgerStats
from .repository import LedgerRepository

logger = logging.getLogger(__name__)


class LedgerPoller:
    """Fetches unprocessed ledger rows in sequence order and acknowledges them.

    Delivery is at-least-once: rows only leave the unprocessed set through
    `mark_processed`, which callers invoke after their downstream writes succeed.
    """

    def __init__(
        self,
        ledger: LedgerRepository,
        *,
        batch_size: int = DEFAULT_POLL_BATCH_SIZE,
        stale_after_minutes: int = DEFAULT_STALE_AFTER_MINUTES,
        clock: Clock = now_local,
    ):
        self._ledger = ledger
        self._batch_size = require_positive_int(batch_size, "batch_size")
        self._stale_after = timedelta(minutes=int(stale_after_minutes))
        self._clock = clock

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def poll_new(self, limit: Optional[int] = None) -> list[LedgerRecord]:
        limit = require_positive_int(limit if limit is not None else self._batch_size, "limit")
        return self._ordered(self._ledger.list_unprocessed(limit=limit))

    def poll_from(self, from_sequence_id: int, limit: Optional[int] = None) -> list[LedgerRecord]:
        """Resume polling at an explicit sequence id (inclusive)."""

        limit = require_positive_int(limit if limit is not None else self._batch_size, "limit")
        return self._ordered(self._ledger.list_unprocessed(limit=limit, from_sequence_id=int(from_sequence_id)))

    def mark_processed(self, records: Sequence[LedgerRecord], *, processed_at: Optional[datetime] = None) -> int:
        if not records:
            return 0
        processed_at = processed_at or self._clock()
        updated = self._ledger.mark_processed(
            sequence_ids=[r.sequence_id for r in records],
            processed_at=processed_at,
        )
        logger.debug("Marked %s/%s ledger rows processed", updated, len(records))
        return updated

    def stats(self, *, now: Optional[datetime] = None) -> LedgerStats:
        now = now or self._clock()
        latest = self._ledger.get_latest()

        lag = None
        if latest:
            reference = latest.created_at or latest.scan_timestamp
            lag = max((now - reference).total_seconds(), 0.0)

        return LedgerStats(
            total_unprocessed=self._ledger.count_unprocessed(),
            last_sequence_id=latest.sequence_id if latest else None,
            last_scan_timestamp=latest.scan_timestamp if latest else None,
            processing_lag_seconds=lag,
            stale_unprocessed=self._ledger.count_unprocessed(created_before=now - self._stale_after),
        )

    @staticmethod
    def _ordered(records: Sequence[LedgerRecord]) -> list[LedgerRecord]:
        return sorted(records, key=lambda r: r.sequence_id)
