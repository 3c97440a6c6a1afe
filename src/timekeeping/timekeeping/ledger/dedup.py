from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from ..core.constants import DEDUP_REASON_WITHIN_WINDOW, DEFAULT_DEDUP_WINDOW_SECONDS
from ..core.enums import EventKind
from .model import LedgerRecord

DedupKey = tuple[str, str, EventKind]


@dataclass(frozen=True)
class DedupVerdict:
    is_duplicate: bool
    reason: Optional[str] = None


ACCEPTED = DedupVerdict(is_duplicate=False)
DUPLICATE = DedupVerdict(is_duplicate=True, reason=DEDUP_REASON_WITHIN_WINDOW)


@dataclass(frozen=True)
class AnnotatedRecord:
    """A ledger row plus the verdicts computed for it; the row itself is never mutated."""

    original: LedgerRecord
    dedup: DedupVerdict = ACCEPTED
    existing_event_id: Optional[int] = None

    @property
    def sequence_id(self) -> int:
        return self.original.sequence_id

    @property
    def is_deduplicated(self) -> bool:
        return self.dedup.is_duplicate

    @property
    def is_already_processed(self) -> bool:
        return self.existing_event_id is not None

    @property
    def is_processable(self) -> bool:
        return not self.is_deduplicated and not self.is_already_processed


@dataclass(frozen=True)
class DedupResult:
    records: tuple[AnnotatedRecord, ...]
    # key -> scan timestamp of the last accepted row with that key
    anchors: Mapping[DedupKey, datetime] = field(default_factory=dict)


def dedup_key(record: LedgerRecord) -> DedupKey:
    return (record.identity_token, record.device_id, record.event_kind)


class Deduplicator:
    """Collapses repeated taps (same identity, device and kind) inside a time window.

    The window is anchored on the last *accepted* scan for a key, so a chain of
    taps 10s apart collapses to its first tap. The boundary is inclusive.
    """

    def __init__(self, *, window_seconds: float = DEFAULT_DEDUP_WINDOW_SECONDS):
        self._window_seconds = float(window_seconds)

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def deduplicate(self, records: Sequence[LedgerRecord]) -> DedupResult:
        anchors: dict[DedupKey, datetime] = {}
        annotated: list[AnnotatedRecord] = []

        for record in records:
            key = dedup_key(record)
            anchor = anchors.get(key)
            if anchor is not None and self._within_window(anchor, record.scan_timestamp):
                annotated.append(AnnotatedRecord(original=record, dedup=DUPLICATE))
                continue

            anchors[key] = record.scan_timestamp
            annotated.append(AnnotatedRecord(original=record, dedup=ACCEPTED))

        return DedupResult(records=tuple(annotated), anchors=MappingProxyType(anchors))

    def _within_window(self, anchor: datetime, scanned_at: datetime) -> bool:
        return abs((scanned_at - anchor).total_seconds()) <= self._window_seconds
