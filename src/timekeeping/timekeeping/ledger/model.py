from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import EventKind


@dataclass(frozen=True)
class LedgerRecord:
    """Một dòng ledger bất biến do đầu đọc thẻ ghi (hệ thống ngoài sở hữu).

    Invariant: `hash_chain = SHA-256(hash_previous || canonical(raw_payload))`.
    Once `processed` is true the row is never updated again.
    """

    sequence_id: int
    identity_token: str
    device_id: str
    scan_timestamp: datetime
    event_kind: EventKind
    raw_payload: Any
    hash_chain: str
    hash_previous: Optional[str]
    processed: bool = False
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class LedgerStats:
    """Snapshot used for alerting on the consumer side."""

    total_unprocessed: int
    last_sequence_id: Optional[int]
    last_scan_timestamp: Optional[datetime]
    processing_lag_seconds: Optional[float]
    stale_unprocessed: int


@dataclass(frozen=True)
class LedgerFilter:
    """Search criteria for browsing the ledger; `None` means no constraint."""

    identity_token: Optional[str] = None
    device_id: Optional[str] = None
    event_kind: Optional[EventKind] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

