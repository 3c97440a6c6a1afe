from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable

Clock = Callable[[], datetime]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Services take this as their default clock so tests can inject a fixed one.
    """
    return datetime.now()


def whole_minutes_between(start: datetime, end: datetime) -> int:
    """Absolute difference in whole minutes (truncated).

    Argument order does not matter: a time_out stamped before its time_in still
    yields the span between the two scans, never a negative duration.
    """
    return int(abs((end - start).total_seconds()) // 60)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like payroll does (0.5 away from zero), not banker's rounding."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
