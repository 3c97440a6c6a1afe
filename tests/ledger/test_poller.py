from datetime import datetime, timedelta

import pytest

from src.timekeeping.timekeeping.core.exceptions import ValidationError
from src.timekeeping.timekeeping.ledger.poller import LedgerPoller


def _scans(count, start):
    return [("card-001", "gate-1", start + timedelta(minutes=i), "time_in") for i in range(count)]


def test_poll_new_returns_unprocessed_in_sequence_order(repos, make_chain, fixed_now):
    records = make_chain(_scans(5, datetime(2025, 1, 6, 8, 0)))
    repos.ledger.add(*reversed(records))
    poller = LedgerPoller(repos.ledger, batch_size=3, clock=lambda: fixed_now)

    polled = poller.poll_new()

    assert [r.sequence_id for r in polled] == [1, 2, 3]


def test_mark_processed_removes_rows_from_next_poll(repos, make_chain, fixed_now):
    repos.ledger.add(*make_chain(_scans(4, datetime(2025, 1, 6, 8, 0))))
    poller = LedgerPoller(repos.ledger, batch_size=2, clock=lambda: fixed_now)

    first = poller.poll_new()
    assert poller.mark_processed(first) == 2
    second = poller.poll_new()

    assert [r.sequence_id for r in second] == [3, 4]
    assert repos.ledger.get(1).processed is True
    assert repos.ledger.get(1).processed_at == fixed_now
    # Already processed rows are never touched again.
    assert poller.mark_processed(first, processed_at=fixed_now + timedelta(hours=1)) == 0
    assert repos.ledger.get(1).processed_at == fixed_now


def test_poll_from_resumes_at_sequence_inclusive(repos, make_chain, fixed_now):
    repos.ledger.add(*make_chain(_scans(6, datetime(2025, 1, 6, 8, 0))))
    poller = LedgerPoller(repos.ledger, clock=lambda: fixed_now)

    assert [r.sequence_id for r in poller.poll_from(4)] == [4, 5, 6]
    assert [r.sequence_id for r in poller.poll_from(2, limit=2)] == [2, 3]


def test_poll_with_invalid_limit_is_rejected(repos, fixed_now):
    poller = LedgerPoller(repos.ledger, clock=lambda: fixed_now)

    with pytest.raises(ValidationError):
        poller.poll_new(0)


def test_stats_on_empty_ledger(repos, fixed_now):
    stats = LedgerPoller(repos.ledger, clock=lambda: fixed_now).stats()

    assert stats.total_unprocessed == 0
    assert stats.last_sequence_id is None
    assert stats.last_scan_timestamp is None
    assert stats.processing_lag_seconds is None
    assert stats.stale_unprocessed == 0


def test_stats_reports_lag_and_stale_rows(repos, make_chain, fixed_now):
    # Two scans an hour old, one scan a minute old.
    old = make_chain(_scans(2, fixed_now - timedelta(hours=1)))
    fresh = make_chain(
        [("card-002", "gate-1", fixed_now - timedelta(minutes=1), "time_in")],
        start_sequence=3,
        hash_previous=old[-1].hash_chain,
    )
    repos.ledger.add(*old, *fresh)
    poller = LedgerPoller(repos.ledger, stale_after_minutes=5, clock=lambda: fixed_now)

    stats = poller.stats()

    assert stats.total_unprocessed == 3
    assert stats.stale_unprocessed == 2
    assert stats.last_sequence_id == 3
    assert stats.last_scan_timestamp == fixed_now - timedelta(minutes=1)
    assert stats.processing_lag_seconds == pytest.approx(59.0)
