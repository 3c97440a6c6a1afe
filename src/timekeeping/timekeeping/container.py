from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .common.datetime_utils import Clock, now_local
from .core.settings import TimekeepingSettings
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .events.materializer import LedgerEventMaterializer
from .events.mysql_event_repository import MySQLAttendanceEventRepository
from .events.service import AttendanceEventService
from .health.monitor import LedgerHealthMonitor
from .health.mysql_health_repository import MySQLLedgerHealthLogRepository
from .ledger.dedup import Deduplicator
from .ledger.mysql_ledger_repository import MySQLLedgerRepository
from .ledger.pipeline import ProcessingPipeline
from .ledger.poller import LedgerPoller
from .ledger.query import LedgerQueryService
from .ledger.reconciler import ExistingEventReconciler
from .schedules.mysql_schedule_repository import MySQLWorkScheduleRepository
from .summaries.calculator import AttendanceSummaryComputer
from .summaries.engine import BusinessRuleEngine, default_rules
from .summaries.mysql_summary_repository import MySQLDailySummaryRepository
from .summaries.service import AttendanceSummaryService


@dataclass(frozen=True)
class Container:
    settings: TimekeepingSettings

    poller: LedgerPoller
    pipeline: ProcessingPipeline
    ledger_query: LedgerQueryService
    materializer: LedgerEventMaterializer
    event_service: AttendanceEventService
    summary_service: AttendanceSummaryService
    health_monitor: LedgerHealthMonitor


def build_services(
    *,
    settings: TimekeepingSettings,
    ledger_repo,
    events_repo,
    employees_repo,
    schedules_repo,
    summaries_repo,
    health_repo,
    clock: Clock = now_local,
) -> Container:
    """Wire services over any repository implementation (MySQL in production, fakes in tests)."""

    poller = LedgerPoller(
        ledger_repo,
        batch_size=settings.poll_batch_size,
        stale_after_minutes=settings.stale_after_minutes,
        clock=clock,
    )
    deduplicator = Deduplicator(window_seconds=settings.dedup_window_seconds)
    pipeline = ProcessingPipeline(poller, deduplicator, ExistingEventReconciler(events_repo))

    engine = BusinessRuleEngine(
        default_rules(
            grace_minutes=settings.grace_period_minutes,
            overtime_threshold_minutes=settings.overtime_threshold_minutes,
        )
    )
    computer = AttendanceSummaryComputer(employees_repo, schedules_repo, events_repo)
    summary_service = AttendanceSummaryService(computer, engine, summaries_repo, schedules_repo, clock=clock)

    materializer = LedgerEventMaterializer(
        pipeline,
        events_repo,
        employees_repo,
        summaries=summary_service,
        clock=clock,
    )
    event_service = AttendanceEventService(events_repo, employees_repo, clock=clock)
    health_monitor = LedgerHealthMonitor(
        ledger_repo,
        poller,
        health_repo,
        deduplicator=deduplicator,
        clock=clock,
    )

    return Container(
        settings=settings,
        poller=poller,
        pipeline=pipeline,
        ledger_query=LedgerQueryService(ledger_repo, events_repo),
        materializer=materializer,
        event_service=event_service,
        summary_service=summary_service,
        health_monitor=health_monitor,
    )


def build_container(*, db_config: Mapping[str, Any], timekeeping: Optional[Mapping[str, Any]] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return build_services(
        settings=TimekeepingSettings.from_mapping(timekeeping),
        ledger_repo=MySQLLedgerRepository(conn),
        events_repo=MySQLAttendanceEventRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn),
        schedules_repo=MySQLWorkScheduleRepository(conn),
        summaries_repo=MySQLDailySummaryRepository(conn),
        health_repo=MySQLLedgerHealthLogRepository(conn),
    )
