from __future__ import annotations

from typing import Protocol, Sequence

from .model import LedgerHealthLog


class LedgerHealthLogRepository(Protocol):
    def append(self, log: LedgerHealthLog) -> int:
        raise NotImplementedError

    def list_recent(self, *, limit: int) -> Sequence[LedgerHealthLog]:
        """Newest first."""

        raise NotImplementedError
