from __future__ import annotations

from datetime import date, datetime
from typing import Mapping, Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.enums import EventKind, EventSource
from ..core.exceptions import DuplicateEventError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    dump_json_column,
    fetchall,
    fetchone,
    in_placeholders,
    load_json_column,
)
from .model import AttendanceEvent, NewAttendanceEvent
from .repository import AttendanceEventRepository

_COLUMNS = """
    event_id, employee_id, event_date, event_time, event_kind, source, ledger_sequence_id,
    is_deduplicated, hash_verified, device_id, ledger_raw_payload, notes,
    is_corrected, original_time, correction_reason, corrected_by, corrected_at
"""


def _to_event(r: dict) -> AttendanceEvent:
    return AttendanceEvent(
        event_id=int(r["event_id"]),
        employee_id=int(r["employee_id"]),
        event_date=r["event_date"],
        event_time=r["event_time"],
        event_kind=EventKind(r["event_kind"]),
        source=EventSource(r["source"]),
        ledger_sequence_id=int(r["ledger_sequence_id"]) if r.get("ledger_sequence_id") is not None else None,
        is_deduplicated=bool(r.get("is_deduplicated")),
        hash_verified=bool(r.get("hash_verified")),
        device_id=r.get("device_id"),
        ledger_raw_payload=load_json_column(r.get("ledger_raw_payload")),
        notes=r.get("notes"),
        is_corrected=bool(r.get("is_corrected")),
        original_time=r.get("original_time"),
        correction_reason=r.get("correction_reason"),
        corrected_by=r.get("corrected_by"),
        corrected_at=r.get("corrected_at"),
    )


class MySQLAttendanceEventRepository(AttendanceEventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_ids_by_ledger_sequence(self, *, sequence_ids: Sequence[int]) -> Mapping[int, int]:
        if not sequence_ids:
            return {}
        ids = [int(s) for s in sequence_ids]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ledger_sequence_id, event_id
                FROM attendance_events
                WHERE ledger_sequence_id IN ({in_placeholders(ids)})
                """,
                tuple(ids),
            )
            return {int(r["ledger_sequence_id"]): int(r["event_id"]) for r in fetchall(cur)}

    def create(self, event: NewAttendanceEvent) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_events(
                        employee_id, event_date, event_time, event_kind, source, ledger_sequence_id,
                        is_deduplicated, hash_verified, device_id, ledger_raw_payload, notes, created_by
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(event.employee_id),
                        event.event_date,
                        event.event_time,
                        event.event_kind.value,
                        event.source.value,
                        event.ledger_sequence_id,
                        int(event.is_deduplicated),
                        int(event.hash_verified),
                        event.device_id,
                        dump_json_column(event.ledger_raw_payload),
                        event.notes,
                        event.created_by,
                    ),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY and event.ledger_sequence_id is not None:
                raise DuplicateEventError(event.ledger_sequence_id) from e
            raise

    def get_by_id(self, event_id: int) -> Optional[AttendanceEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_events WHERE event_id=%s", (int(event_id),))
            r = fetchone(cur)
            return _to_event(r) if r else None

    def list_for_employee_and_date(self, *, employee_id: int, event_date: date) -> Sequence[AttendanceEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_events
                WHERE employee_id=%s AND event_date=%s
                ORDER BY event_time ASC, event_id ASC
                """,
                (int(employee_id), event_date),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def apply_correction(
        self,
        *,
        event_id: int,
        event_time: datetime,
        original_time: datetime,
        reason: str,
        corrected_by: Optional[int],
        corrected_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_events
                SET event_time=%s, event_date=%s, is_corrected=1,
                    original_time=COALESCE(original_time, %s),
                    correction_reason=%s, corrected_by=%s, corrected_at=%s
                WHERE event_id=%s
                """,
                (event_time, event_time.date(), original_time, reason, corrected_by, corrected_at, int(event_id)),
            )
            return cur.rowcount > 0
