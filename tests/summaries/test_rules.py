from datetime import date, datetime

import pytest

from src.timekeeping.timekeeping.core.enums import AttendanceStatus
from src.timekeeping.timekeeping.summaries.engine import BusinessRuleEngine, default_rules
from src.timekeeping.timekeeping.summaries.model import DailyAttendanceSummary
from src.timekeeping.timekeeping.summaries.rules.base import ScheduledWindow
from src.timekeeping.timekeeping.summaries.rules.overtime_rule import OvertimeRule

DAY = date(2025, 1, 6)
START = datetime(2025, 1, 6, 8, 0)
END = datetime(2025, 1, 6, 17, 0)


def _at(hour, minute=0):
    return datetime(2025, 1, 6, hour, minute)


def _summary(time_in=None, time_out=None, total=None, break_minutes=60, **extra):
    return DailyAttendanceSummary(
        employee_id=1,
        attendance_date=DAY,
        scheduled_start=START,
        scheduled_end=END,
        time_in=time_in,
        time_out=time_out,
        break_minutes=break_minutes,
        total_hours_worked=total,
        **extra,
    )


@pytest.fixture
def engine():
    return BusinessRuleEngine()


def test_within_grace_is_not_late(engine):
    result = engine.apply_rules(_summary(time_in=_at(8, 10)))

    assert result.is_present
    assert result.is_late is False
    assert result.late_minutes is None


def test_late_minutes_count_past_grace(engine):
    result = engine.apply_rules(_summary(time_in=_at(8, 25)))

    assert result.is_late is True
    assert result.late_minutes == 10
    assert result.attendance_status == AttendanceStatus.LATE


def test_grace_boundary_is_inclusive(engine):
    assert engine.apply_rules(_summary(time_in=_at(8, 15))).is_late is False


def test_no_time_in_is_absent_and_resets_flags(engine):
    stale = _summary(is_present=True, is_late=True, late_minutes=12, is_overtime=True)

    result = engine.apply_rules(stale)

    assert result.is_present is False
    assert result.is_late is False
    assert result.is_overtime is False
    assert result.late_minutes is None
    assert result.attendance_status == AttendanceStatus.ABSENT


def test_undertime(engine):
    result = engine.apply_rules(_summary(time_in=_at(8, 0), time_out=_at(16, 0), total=7.0))

    assert result.is_undertime is True
    assert result.undertime_minutes == 60
    assert result.is_overtime is False
    assert result.attendance_status == AttendanceStatus.UNDERTIME


def test_open_day_skips_undertime(engine):
    result = engine.apply_rules(_summary(time_in=_at(8, 0)))

    assert result.is_present
    assert result.is_undertime is False
    assert result.undertime_minutes is None


def test_overtime_is_strictly_after_scheduled_end(engine):
    on_time = engine.apply_rules(_summary(time_in=_at(8, 0), time_out=_at(17, 0), total=8.0))
    late_leave = engine.apply_rules(_summary(time_in=_at(8, 0), time_out=_at(17, 1), total=8.02))

    assert on_time.is_overtime is False
    assert on_time.attendance_status == AttendanceStatus.PRESENT
    assert late_leave.is_overtime is True
    assert late_leave.attendance_status == AttendanceStatus.OVERTIME


def test_late_and_overtime_together(engine):
    result = engine.apply_rules(_summary(time_in=_at(8, 30), time_out=_at(18, 0), total=8.5))

    assert result.is_late and result.late_minutes == 15
    assert result.is_overtime
    assert result.is_undertime is False


def test_late_and_undertime_together(engine):
    result = engine.apply_rules(_summary(time_in=_at(9, 0), time_out=_at(16, 0), total=6.0))

    assert result.is_late and result.late_minutes == 45
    assert result.is_undertime and result.undertime_minutes == 120


def test_configured_thresholds():
    engine = BusinessRuleEngine(default_rules(grace_minutes=5, overtime_threshold_minutes=30))

    result = engine.apply_rules(_summary(time_in=_at(8, 6), time_out=_at(17, 20), total=8.23))

    assert result.is_late and result.late_minutes == 1
    assert result.is_overtime is False


def test_explicit_window_overrides_summary_window(engine):
    result = engine.apply_rules(
        DailyAttendanceSummary(employee_id=1, attendance_date=DAY, time_in=_at(9, 10)),
        scheduled_start=_at(9, 0),
        scheduled_end=_at(18, 0),
    )

    assert result.scheduled_start == _at(9, 0)
    assert result.is_late is False


def test_rules_without_window_only_mark_presence(engine):
    result = engine.apply_rules(
        DailyAttendanceSummary(employee_id=1, attendance_date=DAY, time_in=_at(11, 0), time_out=_at(12, 0))
    )

    assert result.is_present
    assert not (result.is_late or result.is_undertime or result.is_overtime)


def test_overtime_rule_needs_time_out():
    assert OvertimeRule().evaluate(_summary(time_in=_at(8, 0)), ScheduledWindow(START, END)) == {}
