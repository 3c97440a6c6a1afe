from datetime import datetime, timedelta

import pytest

from src.timekeeping.timekeeping.core.enums import EventKind, EventSource
from src.timekeeping.timekeeping.core.exceptions import NotFoundError, ValidationError
from src.timekeeping.timekeeping.events.model import NewAttendanceEvent


def test_record_manual_event(container, repos):
    event_id = container.event_service.record_manual_event(
        employee_id=1,
        event_time=datetime(2025, 1, 6, 8, 0),
        event_kind=EventKind.TIME_IN,
        created_by=99,
        notes="  forgot card  ",
    )

    event = repos.events.get_by_id(event_id)
    assert event.source == EventSource.MANUAL
    assert event.ledger_sequence_id is None
    assert event.notes == "forgot card"
    assert repos.events.created_by[event_id] == 99


def test_record_manual_event_for_unknown_employee(container):
    with pytest.raises(NotFoundError):
        container.event_service.record_manual_event(
            employee_id=404, event_time=datetime(2025, 1, 6, 8, 0), event_kind=EventKind.TIME_IN
        )


def test_correction_keeps_the_first_original_time(container, repos, fixed_now):
    first_time = datetime(2025, 1, 6, 8, 40)
    event_id = container.event_service.record_manual_event(
        employee_id=1, event_time=first_time, event_kind=EventKind.TIME_IN
    )

    container.event_service.correct_event(event_id=event_id, new_time=first_time - timedelta(minutes=30), reason="badge lag")
    corrected = container.event_service.correct_event(
        event_id=event_id, new_time=datetime(2025, 1, 6, 8, 0), reason="supervisor confirmed", corrected_by=7
    )

    assert corrected.is_corrected
    assert corrected.event_time == datetime(2025, 1, 6, 8, 0)
    assert corrected.original_time == first_time
    assert corrected.correction_reason == "supervisor confirmed"
    assert corrected.corrected_by == 7
    assert corrected.corrected_at == fixed_now
    assert len(repos.events.rows) == 1


def test_correction_requires_reason(container):
    event_id = container.event_service.record_manual_event(
        employee_id=1, event_time=datetime(2025, 1, 6, 8, 0), event_kind=EventKind.TIME_IN
    )

    with pytest.raises(ValidationError):
        container.event_service.correct_event(event_id=event_id, new_time=datetime(2025, 1, 6, 8, 5), reason="   ")


def test_correction_of_missing_event(container):
    with pytest.raises(NotFoundError):
        container.event_service.correct_event(event_id=123, new_time=datetime(2025, 1, 6, 8, 5), reason="typo")


def test_ledger_event_cannot_move_to_another_day(container, repos):
    event_id = repos.events.create(
        NewAttendanceEvent(
            employee_id=1,
            event_date=datetime(2025, 1, 6).date(),
            event_time=datetime(2025, 1, 6, 8, 0),
            event_kind=EventKind.TIME_IN,
            source=EventSource.DEVICE,
            ledger_sequence_id=1,
        )
    )

    with pytest.raises(ValidationError):
        container.event_service.correct_event(event_id=event_id, new_time=datetime(2025, 1, 7, 8, 0), reason="wrong day")
