from datetime import datetime, timedelta

from src.timekeeping.timekeeping.core.constants import DEDUP_REASON_WITHIN_WINDOW
from src.timekeeping.timekeeping.ledger.dedup import Deduplicator, dedup_key

T0 = datetime(2025, 1, 6, 8, 0, 0)


def _flags(result):
    return [r.is_deduplicated for r in result.records]


def test_window_anchors_on_last_accepted_tap(make_chain):
    records = make_chain(
        [
            ("card-001", "gate-1", T0, "time_in"),
            ("card-001", "gate-1", T0 + timedelta(seconds=10), "time_in"),
            ("card-001", "gate-1", T0 + timedelta(seconds=20), "time_in"),
        ]
    )

    result = Deduplicator(window_seconds=15).deduplicate(records)

    assert _flags(result) == [False, True, False]
    assert result.records[1].dedup.reason == DEDUP_REASON_WITHIN_WINDOW
    assert result.anchors[dedup_key(records[0])] == T0 + timedelta(seconds=20)


def test_exactly_on_window_boundary_is_duplicate(make_chain):
    records = make_chain(
        [
            ("card-001", "gate-1", T0, "time_in"),
            ("card-001", "gate-1", T0 + timedelta(seconds=15), "time_in"),
            ("card-001", "gate-1", T0 + timedelta(seconds=30, milliseconds=1), "time_in"),
        ]
    )

    result = Deduplicator(window_seconds=15).deduplicate(records)

    assert _flags(result) == [False, True, False]


def test_different_device_kind_or_identity_are_not_duplicates(make_chain):
    records = make_chain(
        [
            ("card-001", "gate-1", T0, "time_in"),
            ("card-001", "gate-2", T0 + timedelta(seconds=1), "time_in"),
            ("card-001", "gate-1", T0 + timedelta(seconds=2), "time_out"),
            ("card-002", "gate-1", T0 + timedelta(seconds=3), "time_in"),
        ]
    )

    result = Deduplicator().deduplicate(records)

    assert _flags(result) == [False, False, False, False]
    assert all(r.dedup.reason is None for r in result.records)


def test_deduplicate_is_idempotent_and_does_not_touch_rows(make_chain):
    records = make_chain(
        [
            ("card-001", "gate-1", T0, "time_in"),
            ("card-001", "gate-1", T0 + timedelta(seconds=5), "time_in"),
            ("card-002", "gate-1", T0 + timedelta(seconds=6), "time_in"),
        ]
    )
    dedup = Deduplicator()

    first = dedup.deduplicate(records)
    second = dedup.deduplicate(records)

    assert _flags(first) == _flags(second) == [False, True, False]
    assert [r.original for r in first.records] == records


def test_empty_batch():
    result = Deduplicator().deduplicate([])

    assert result.records == ()
    assert dict(result.anchors) == {}
