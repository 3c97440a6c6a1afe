from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import LedgerFilter, LedgerRecord


class LedgerRepository(Protocol):
    """Read access to the append-only ledger plus the `processed` flag."""

    def list_unprocessed(self, *, limit: int, from_sequence_id: Optional[int] = None) -> Sequence[LedgerRecord]:
        """Unprocessed rows ordered by sequence_id ascending, capped at `limit`."""

        raise NotImplementedError

    def list_after(self, *, after_sequence_id: Optional[int], limit: int) -> Sequence[LedgerRecord]:
        """All rows (processed or not) with sequence_id > after_sequence_id, ascending."""

        raise NotImplementedError

    def mark_processed(self, *, sequence_ids: Sequence[int], processed_at: datetime) -> int:
        """Set processed=true on still-unprocessed rows; returns the number updated."""

        raise NotImplementedError

    def count_unprocessed(self, *, created_before: Optional[datetime] = None) -> int:
        raise NotImplementedError

    def get_latest(self) -> Optional[LedgerRecord]:
        raise NotImplementedError

    def get_by_sequence(self, sequence_id: int) -> Optional[LedgerRecord]:
        raise NotImplementedError

    def get_before(self, *, before_sequence_id: int) -> Optional[LedgerRecord]:
        """The row immediately preceding `before_sequence_id`, if any."""

        raise NotImplementedError

    def search(self, *, criteria: LedgerFilter, limit: int, offset: int) -> Sequence[LedgerRecord]:
        """Rows matching `criteria`, newest sequence first."""

        raise NotImplementedError

    def count(self, *, criteria: LedgerFilter) -> int:
        raise NotImplementedError
