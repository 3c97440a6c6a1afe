from __future__ import annotations

from typing import Sequence

from ..core.enums import HealthStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json_column, fetchall, load_json_column
from .model import LedgerHealthLog
from .repository import LedgerHealthLogRepository


class MySQLLedgerHealthLogRepository(LedgerHealthLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, log: LedgerHealthLog) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO ledger_health_logs(
                    check_timestamp, status, last_sequence_id,
                    gaps_detected, gap_details, gap_count,
                    hash_failures, hash_failure_details, hash_failure_count,
                    total_unprocessed, stale_unprocessed, processing_lag_seconds,
                    duplicate_count, rows_checked, notes, recommendations
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    log.check_timestamp,
                    log.status.value,
                    log.last_sequence_id,
                    int(log.gaps_detected),
                    dump_json_column(log.gap_details),
                    log.gap_count,
                    int(log.hash_failures),
                    dump_json_column(log.hash_failure_details),
                    log.hash_failure_count,
                    log.total_unprocessed,
                    log.stale_unprocessed,
                    log.processing_lag_seconds,
                    log.duplicate_count,
                    log.rows_checked,
                    log.notes,
                    log.recommendations,
                ),
            )
            return int(cur.lastrowid)

    def list_recent(self, *, limit: int) -> Sequence[LedgerHealthLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT log_id, check_timestamp, status, last_sequence_id,
                       gaps_detected, gap_details, gap_count,
                       hash_failures, hash_failure_details, hash_failure_count,
                       total_unprocessed, stale_unprocessed, processing_lag_seconds,
                       duplicate_count, rows_checked, notes, recommendations
                FROM ledger_health_logs
                ORDER BY check_timestamp DESC, log_id DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [
                LedgerHealthLog(
                    log_id=int(r["log_id"]),
                    check_timestamp=r["check_timestamp"],
                    status=HealthStatus(r["status"]),
                    last_sequence_id=r.get("last_sequence_id"),
                    gaps_detected=bool(r.get("gaps_detected")),
                    gap_details=load_json_column(r.get("gap_details")) or {},
                    gap_count=int(r.get("gap_count") or 0),
                    hash_failures=bool(r.get("hash_failures")),
                    hash_failure_details=load_json_column(r.get("hash_failure_details")) or {},
                    hash_failure_count=int(r.get("hash_failure_count") or 0),
                    total_unprocessed=int(r.get("total_unprocessed") or 0),
                    stale_unprocessed=int(r.get("stale_unprocessed") or 0),
                    processing_lag_seconds=(
                        float(r["processing_lag_seconds"]) if r.get("processing_lag_seconds") is not None else None
                    ),
                    duplicate_count=int(r.get("duplicate_count") or 0),
                    rows_checked=int(r.get("rows_checked") or 0),
                    notes=r.get("notes"),
                    recommendations=r.get("recommendations"),
                )
                for r in fetchall(cur)
            ]
