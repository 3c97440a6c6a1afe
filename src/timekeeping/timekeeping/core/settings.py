from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..common.validators import require_non_negative_int, require_positive_int
from .constants import (
    DEFAULT_DEDUP_WINDOW_SECONDS,
    DEFAULT_GRACE_PERIOD_MINUTES,
    DEFAULT_OVERTIME_THRESHOLD_MINUTES,
    DEFAULT_POLL_BATCH_SIZE,
    DEFAULT_STALE_AFTER_MINUTES,
)


@dataclass(frozen=True)
class TimekeepingSettings:
    """Business-rule and polling tunables, overridable per environment."""

    grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES
    overtime_threshold_minutes: int = DEFAULT_OVERTIME_THRESHOLD_MINUTES
    dedup_window_seconds: int = DEFAULT_DEDUP_WINDOW_SECONDS
    poll_batch_size: int = DEFAULT_POLL_BATCH_SIZE
    stale_after_minutes: int = DEFAULT_STALE_AFTER_MINUTES

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> "TimekeepingSettings":
        values = values or {}
        return cls(
            grace_period_minutes=require_non_negative_int(
                values.get("GRACE_PERIOD_MINUTES", DEFAULT_GRACE_PERIOD_MINUTES), "GRACE_PERIOD_MINUTES"
            ),
            overtime_threshold_minutes=require_non_negative_int(
                values.get("OVERTIME_THRESHOLD_MINUTES", DEFAULT_OVERTIME_THRESHOLD_MINUTES),
                "OVERTIME_THRESHOLD_MINUTES",
            ),
            dedup_window_seconds=require_non_negative_int(
                values.get("DEDUP_WINDOW_SECONDS", DEFAULT_DEDUP_WINDOW_SECONDS), "DEDUP_WINDOW_SECONDS"
            ),
            poll_batch_size=require_positive_int(
                values.get("POLL_BATCH_SIZE", DEFAULT_POLL_BATCH_SIZE), "POLL_BATCH_SIZE"
            ),
            stale_after_minutes=require_non_negative_int(
                values.get("STALE_AFTER_MINUTES", DEFAULT_STALE_AFTER_MINUTES), "STALE_AFTER_MINUTES"
            ),
        )
