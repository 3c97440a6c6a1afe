from dataclasses import replace
from datetime import date, datetime, time

from src.timekeeping.timekeeping.core.enums import EventKind
from src.timekeeping.timekeeping.summaries.model import DailyAttendanceSummary

MONDAY = date(2025, 1, 6)


def _punch(container, hh, mm, kind):
    container.event_service.record_manual_event(
        employee_id=1, event_time=datetime.combine(MONDAY, time(hh, mm)), event_kind=EventKind(kind)
    )


def test_recompute_persists_classified_summary(container, repos, fixed_now):
    _punch(container, 8, 40, "time_in")
    _punch(container, 17, 0, "time_out")

    summary = container.summary_service.recompute(1, MONDAY)

    assert summary.is_late and summary.late_minutes == 25
    assert summary.calculated_at == fixed_now
    assert repos.summaries.get(employee_id=1, attendance_date=MONDAY) == summary


def test_recompute_skips_finalized_summary(container, repos):
    _punch(container, 8, 0, "time_in")
    _punch(container, 17, 0, "time_out")
    locked = container.summary_service.finalize(1, MONDAY)

    # A late correction after payroll lock must not change the stored row.
    _punch(container, 7, 0, "time_in")
    result = container.summary_service.recompute(1, MONDAY)

    assert locked.is_finalized
    assert result.is_finalized
    assert result.time_in == datetime(2025, 1, 6, 8, 0)
    assert repos.summaries.get(employee_id=1, attendance_date=MONDAY).time_in == datetime(2025, 1, 6, 8, 0)


def test_finalize_is_idempotent(container, repos):
    first = container.summary_service.finalize(1, MONDAY)
    second = container.summary_service.finalize(1, MONDAY)

    assert first.is_finalized and second.is_finalized
    assert first.is_present is False
    assert len(repos.summaries.rows) == 1


def test_recompute_many_handles_each_day_once(container, repos):
    _punch(container, 8, 0, "time_in")

    results = container.summary_service.recompute_many([(1, MONDAY), (1, MONDAY), (2, MONDAY)])

    assert [(s.employee_id, s.attendance_date) for s in results] == [(1, MONDAY), (2, MONDAY)]
    assert results[0].is_present and not results[1].is_present


def test_evaluate_does_not_persist(container, repos):
    _punch(container, 8, 0, "time_in")

    summary = container.summary_service.evaluate(1, MONDAY)

    assert summary.is_present
    assert repos.summaries.rows == {}


def test_apply_rules_resolves_window_from_schedule(container):
    bare = DailyAttendanceSummary(employee_id=1, attendance_date=MONDAY, time_in=datetime(2025, 1, 6, 8, 20))

    by_employee = container.summary_service.apply_rules(bare)
    by_schedule_id = container.summary_service.apply_rules(replace(bare, work_schedule_id=1))

    assert by_employee.scheduled_start == datetime(2025, 1, 6, 8, 0)
    assert by_employee.is_late and by_employee.late_minutes == 5
    assert by_schedule_id == replace(by_employee, work_schedule_id=1)


def test_apply_rules_for_unknown_employee_only_marks_presence(container):
    bare = DailyAttendanceSummary(employee_id=404, attendance_date=MONDAY, time_in=datetime(2025, 1, 6, 11, 0))

    result = container.summary_service.apply_rules(bare)

    assert result.is_present
    assert result.scheduled_start is None
    assert result.is_late is False
