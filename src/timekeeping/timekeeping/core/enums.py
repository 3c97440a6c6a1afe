from __future__ import annotations

from enum import Enum, IntEnum


class EventKind(str, Enum):
    """Loại sự kiện quét thẻ ghi trong ledger."""

    TIME_IN = "time_in"
    TIME_OUT = "time_out"
    BREAK_START = "break_start"
    BREAK_END = "break_end"


class EventSource(str, Enum):
    """Nguồn gốc của một attendance event."""

    DEVICE = "device"
    MANUAL = "manual"
    IMPORT = "import"


class HealthStatus(str, Enum):
    """Trạng thái sức khoẻ ledger sau mỗi lần kiểm tra."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class HashFailureReason(str, Enum):
    HASH_MISMATCH = "hash_mismatch"
    CHAIN_BROKEN = "chain_broken"


class Weekday(IntEnum):
    """Matches `date.weekday()`."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


class AttendanceStatus(str, Enum):
    """Nhãn trạng thái ngày công suy ra từ các cờ của daily summary."""

    PRESENT = "present"
    LATE = "late"
    UNDERTIME = "undertime"
    OVERTIME = "overtime"
    ABSENT = "absent"
