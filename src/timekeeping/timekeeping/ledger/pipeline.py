from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Collection, Optional, Sequence

from .dedup import AnnotatedRecord, Deduplicator
from .model import LedgerRecord
from .poller import LedgerPoller
from .reconciler import ExistingEventReconciler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchStats:
    total: int = 0
    duplicates: int = 0
    unique: int = 0
    already_processed: int = 0


@dataclass(frozen=True)
class PreparedBatch:
    events: tuple[AnnotatedRecord, ...] = ()
    stats: BatchStats = field(default_factory=BatchStats)
    processable: tuple[AnnotatedRecord, ...] = ()

    @property
    def records(self) -> list[LedgerRecord]:
        return [e.original for e in self.events]

    @property
    def is_empty(self) -> bool:
        return not self.events

    @property
    def last_sequence_id(self) -> Optional[int]:
        return self.events[-1].sequence_id if self.events else None


def compute_stats(events: Sequence[AnnotatedRecord]) -> BatchStats:
    """Duplicates take precedence: a duplicate row is never also counted as already processed."""

    duplicates = sum(1 for e in events if e.is_deduplicated)
    already_processed = sum(1 for e in events if not e.is_deduplicated and e.is_already_processed)
    return BatchStats(
        total=len(events),
        duplicates=duplicates,
        unique=len(events) - duplicates - already_processed,
        already_processed=already_processed,
    )


class ProcessingPipeline:
    """Poll -> dedup -> reconcile -> processable set.

    Side-effect free until `mark_processed`, which callers invoke only after they
    have persisted attendance events for the processable rows.
    """

    def __init__(self, poller: LedgerPoller, deduplicator: Deduplicator, reconciler: ExistingEventReconciler):
        self._poller = poller
        self._deduplicator = deduplicator
        self._reconciler = reconciler

    def prepare(self, limit: Optional[int] = None, *, from_sequence_id: Optional[int] = None) -> PreparedBatch:
        if from_sequence_id is None:
            polled = self._poller.poll_new(limit)
        else:
            polled = self._poller.poll_from(from_sequence_id, limit)

        if not polled:
            return PreparedBatch()

        deduped = self._deduplicator.deduplicate(polled)
        checked = self._reconciler.reconcile(deduped.records)
        stats = compute_stats(checked)
        processable = tuple(e for e in checked if e.is_processable)

        logger.info(
            "Prepared ledger batch seq %s..%s: total=%s duplicates=%s already_processed=%s processable=%s",
            checked[0].sequence_id,
            checked[-1].sequence_id,
            stats.total,
            stats.duplicates,
            stats.already_processed,
            len(processable),
        )
        return PreparedBatch(events=checked, stats=stats, processable=processable)

    def mark_processed(
        self,
        batch: PreparedBatch,
        *,
        processed_at: Optional[datetime] = None,
        hold: Collection[int] = (),
    ) -> int:
        """Acknowledge the batch, except the sequence ids in `hold`, which stay pending."""

        records = [r for r in batch.records if r.sequence_id not in hold]
        return self._poller.mark_processed(records, processed_at=processed_at)
