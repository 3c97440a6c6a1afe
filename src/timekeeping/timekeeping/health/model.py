from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import HealthStatus


@dataclass(frozen=True)
class LedgerHealthLog:
    """Point-in-time ledger audit. Append-only: one row per check."""

    check_timestamp: datetime
    status: HealthStatus
    last_sequence_id: Optional[int] = None
    gaps_detected: bool = False
    gap_details: dict = field(default_factory=dict)
    gap_count: int = 0
    hash_failures: bool = False
    hash_failure_details: dict = field(default_factory=dict)
    hash_failure_count: int = 0
    total_unprocessed: int = 0
    stale_unprocessed: int = 0
    processing_lag_seconds: Optional[float] = None
    duplicate_count: int = 0
    rows_checked: int = 0
    notes: Optional[str] = None
    recommendations: Optional[str] = None
    log_id: Optional[int] = None

    @property
    def has_issues(self) -> bool:
        return self.gaps_detected or self.hash_failures

    @property
    def issue_count(self) -> int:
        return self.gap_count + self.hash_failure_count
