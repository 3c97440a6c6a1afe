from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import Clock, now_local
from ..core.enums import HashFailureReason, HealthStatus
from ..ledger.dedup import Deduplicator
from ..ledger.hashing import verify_record_hash
from ..ledger.model import LedgerRecord, LedgerStats
from ..ledger.poller import LedgerPoller
from ..ledger.repository import LedgerRepository
from .model import LedgerHealthLog
from .repository import LedgerHealthLogRepository

logger = logging.getLogger(__name__)

_LOG_LEVEL_BY_STATUS = {
    HealthStatus.HEALTHY: logging.INFO,
    HealthStatus.WARNING: logging.WARNING,
    HealthStatus.CRITICAL: logging.ERROR,
}


@dataclass
class ChainScan:
    """Result of walking the ledger once in sequence order."""

    rows_checked: int = 0
    last_sequence_id: Optional[int] = None
    missing_ranges: list[list[int]] = field(default_factory=list)
    failures: list[dict] = field(default_factory=list)

    @property
    def failed_sequences(self) -> list[int]:
        return sorted({f["sequence_id"] for f in self.failures})


def scan_chain(ledger: LedgerRepository, *, chunk_size: int) -> ChainScan:
    scan = ChainScan()
    previous: Optional[LedgerRecord] = None
    after: Optional[int] = None

    while True:
        chunk = ledger.list_after(after_sequence_id=after, limit=chunk_size)
        if not chunk:
            break

        for record in chunk:
            scan.rows_checked += 1
            if previous is not None:
                if record.sequence_id != previous.sequence_id + 1:
                    scan.missing_ranges.append([previous.sequence_id + 1, record.sequence_id - 1])
                elif (record.hash_previous or "") != (previous.hash_chain or ""):
                    scan.failures.append(
                        {"sequence_id": record.sequence_id, "reason": HashFailureReason.CHAIN_BROKEN.value}
                    )

            if not verify_record_hash(record):
                scan.failures.append({"sequence_id": record.sequence_id, "reason": HashFailureReason.HASH_MISMATCH.value})

            previous = record

        after = chunk[-1].sequence_id
        if len(chunk) < chunk_size:
            break

    scan.last_sequence_id = previous.sequence_id if previous else None
    return scan


def derive_status(*, hash_failure_count: int, gap_count: int, stale_unprocessed: int) -> HealthStatus:
    if hash_failure_count:
        return HealthStatus.CRITICAL
    if gap_count or stale_unprocessed:
        return HealthStatus.WARNING
    return HealthStatus.HEALTHY


def describe(scan: ChainScan, stats: LedgerStats, duplicate_count: int) -> tuple[str, Optional[str]]:
    notes: list[str] = []
    recommendations: list[str] = []

    if scan.missing_ranges:
        notes.append(f"{len(scan.missing_ranges)} sequence gap(s)")
        recommendations.append("Check the ledger writer for dropped rows in the missing sequence ranges.")
    if scan.failures:
        notes.append(f"{len(scan.failed_sequences)} hash failure(s)")
        recommendations.append("Treat affected rows as tampered: freeze payroll for their days and audit the writer.")
    if duplicate_count:
        notes.append(f"{duplicate_count} duplicate event(s)")
    if stats.total_unprocessed:
        notes.append(f"{stats.total_unprocessed} unprocessed entry(ies)")
    if stats.stale_unprocessed:
        recommendations.append("Ledger consumer is lagging: make sure the processing job is running.")

    return (", ".join(notes) or "All checks passed"), (" ".join(recommendations) or None)


class LedgerHealthMonitor:
    """Audits the ledger for sequence gaps and hash-chain divergence.

    Anomalies become warning/critical log rows, never exceptions. The ledger
    itself is only read.
    """

    def __init__(
        self,
        ledger: LedgerRepository,
        poller: LedgerPoller,
        logs: LedgerHealthLogRepository,
        *,
        deduplicator: Optional[Deduplicator] = None,
        chunk_size: Optional[int] = None,
        clock: Clock = now_local,
    ):
        self._ledger = ledger
        self._poller = poller
        self._logs = logs
        self._deduplicator = deduplicator or Deduplicator()
        self._chunk_size = int(chunk_size or poller.batch_size)
        self._clock = clock

    def run_check(self, *, now: Optional[datetime] = None) -> LedgerHealthLog:
        now = now or self._clock()

        scan = scan_chain(self._ledger, chunk_size=self._chunk_size)
        stats = self._poller.stats(now=now)
        duplicate_count = sum(1 for r in self._deduplicator.deduplicate(self._poller.poll_new()).records if r.is_deduplicated)

        failed = scan.failed_sequences
        status = derive_status(
            hash_failure_count=len(failed),
            gap_count=len(scan.missing_ranges),
            stale_unprocessed=stats.stale_unprocessed,
        )
        notes, recommendations = describe(scan, stats, duplicate_count)

        log = LedgerHealthLog(
            check_timestamp=now,
            status=status,
            last_sequence_id=scan.last_sequence_id,
            gaps_detected=bool(scan.missing_ranges),
            gap_details={"missing_ranges": scan.missing_ranges} if scan.missing_ranges else {},
            gap_count=len(scan.missing_ranges),
            hash_failures=bool(failed),
            hash_failure_details={"failed_sequences": failed, "reasons": scan.failures} if failed else {},
            hash_failure_count=len(failed),
            total_unprocessed=stats.total_unprocessed,
            stale_unprocessed=stats.stale_unprocessed,
            processing_lag_seconds=stats.processing_lag_seconds,
            duplicate_count=duplicate_count,
            rows_checked=scan.rows_checked,
            notes=notes,
            recommendations=recommendations,
        )
        log_id = self._logs.append(log)

        logger.log(_LOG_LEVEL_BY_STATUS[status], "Ledger health %s: %s", status.value, notes)
        return replace(log, log_id=log_id)

    def recent(self, limit: int) -> list[LedgerHealthLog]:
        return list(self._logs.list_recent(limit=int(limit)))
