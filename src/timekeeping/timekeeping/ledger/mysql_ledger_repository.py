from __future__ import annotations

from datetime import datetime, time, timedelta
from typing import Optional, Sequence

from ..core.enums import EventKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_placeholders, load_json_column
from .model import LedgerFilter, LedgerRecord
from .repository import LedgerRepository

_COLUMNS = """
    sequence_id, identity_token, device_id, scan_timestamp, event_kind,
    raw_payload, hash_chain, hash_previous, processed, processed_at, created_at
"""


def _to_record(r: dict) -> LedgerRecord:
    return LedgerRecord(
        sequence_id=int(r["sequence_id"]),
        identity_token=r["identity_token"],
        device_id=r["device_id"],
        scan_timestamp=r["scan_timestamp"],
        event_kind=EventKind(r["event_kind"]),
        raw_payload=load_json_column(r.get("raw_payload")),
        hash_chain=r["hash_chain"],
        hash_previous=r.get("hash_previous"),
        processed=bool(r.get("processed")),
        processed_at=r.get("processed_at"),
        created_at=r.get("created_at"),
    )


def _filter_clause(criteria: LedgerFilter) -> tuple[str, list[object]]:
    clauses: list[str] = []
    params: list[object] = []
    if criteria.identity_token is not None:
        clauses.append("identity_token = %s")
        params.append(criteria.identity_token)
    if criteria.device_id is not None:
        clauses.append("device_id = %s")
        params.append(criteria.device_id)
    if criteria.event_kind is not None:
        clauses.append("event_kind = %s")
        params.append(criteria.event_kind.value)
    if criteria.date_from is not None:
        clauses.append("scan_timestamp >= %s")
        params.append(datetime.combine(criteria.date_from, time.min))
    if criteria.date_to is not None:
        clauses.append("scan_timestamp < %s")
        params.append(datetime.combine(criteria.date_to + timedelta(days=1), time.min))
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


class MySQLLedgerRepository(LedgerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_unprocessed(self, *, limit: int, from_sequence_id: Optional[int] = None) -> Sequence[LedgerRecord]:
        clauses = ["processed = 0"]
        params: list[object] = []
        if from_sequence_id is not None:
            clauses.append("sequence_id >= %s")
            params.append(int(from_sequence_id))
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM ledger_records
                WHERE {" AND ".join(clauses)}
                ORDER BY sequence_id ASC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_after(self, *, after_sequence_id: Optional[int], limit: int) -> Sequence[LedgerRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            if after_sequence_id is None:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM ledger_records ORDER BY sequence_id ASC LIMIT %s",
                    (int(limit),),
                )
            else:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM ledger_records
                    WHERE sequence_id > %s
                    ORDER BY sequence_id ASC
                    LIMIT %s
                    """,
                    (int(after_sequence_id), int(limit)),
                )
            return [_to_record(r) for r in fetchall(cur)]

    def mark_processed(self, *, sequence_ids: Sequence[int], processed_at: datetime) -> int:
        if not sequence_ids:
            return 0
        ids = [int(s) for s in sequence_ids]
        with db_cursor(self._conn_factory) as (_, cur):
            # processed rows are immutable; only flip rows that are still pending.
            cur.execute(
                f"""
                UPDATE ledger_records
                SET processed = 1, processed_at = %s
                WHERE processed = 0 AND sequence_id IN ({in_placeholders(ids)})
                """,
                (processed_at, *ids),
            )
            return cur.rowcount

    def count_unprocessed(self, *, created_before: Optional[datetime] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if created_before is None:
                cur.execute("SELECT COUNT(*) AS n FROM ledger_records WHERE processed = 0")
            else:
                cur.execute(
                    "SELECT COUNT(*) AS n FROM ledger_records WHERE processed = 0 AND created_at < %s",
                    (created_before,),
                )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def get_latest(self) -> Optional[LedgerRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM ledger_records ORDER BY sequence_id DESC LIMIT 1")
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_by_sequence(self, sequence_id: int) -> Optional[LedgerRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM ledger_records WHERE sequence_id=%s", (int(sequence_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_before(self, *, before_sequence_id: int) -> Optional[LedgerRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM ledger_records
                WHERE sequence_id < %s
                ORDER BY sequence_id DESC
                LIMIT 1
                """,
                (int(before_sequence_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def search(self, *, criteria: LedgerFilter, limit: int, offset: int) -> Sequence[LedgerRecord]:
        where, params = _filter_clause(criteria)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM ledger_records
                {where}
                ORDER BY sequence_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, int(limit), int(offset)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count(self, *, criteria: LedgerFilter) -> int:
        where, params = _filter_clause(criteria)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM ledger_records {where}", tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
