from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..model import DailyAttendanceSummary


@dataclass(frozen=True)
class ScheduledWindow:
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class SummaryRule(ABC):
    """Strategy Pattern: one independent business rule over a present day's summary."""

    @abstractmethod
    def evaluate(self, summary: DailyAttendanceSummary, window: ScheduledWindow) -> dict[str, Any]:
        """Return the summary fields this rule sets (empty when it does not fire)."""

        raise NotImplementedError
