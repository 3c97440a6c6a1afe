from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime, time, timedelta
from typing import Any, Iterator, Optional, Sequence

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection) -> Iterator[tuple[Any, Any]]:
    """One connection + dictionary cursor per unit of work; commit on success, rollback on error."""

    conn = conn_factory.connect()
    cur = conn.cursor(dictionary=True)
    try:
        yield conn, cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()


def fetchone(cur) -> Optional[dict]:
    return cur.fetchone() or None


def fetchall(cur) -> list[dict]:
    return list(cur.fetchall() or [])


def in_placeholders(values: Sequence[Any]) -> str:
    """`%s,%s,...` for an IN (...) clause with one slot per value."""
    return ",".join("%s" for _ in values)


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Schedule TIME columns arrive as time, timedelta (C extension) or 'HH:MM[:SS]' text."""

    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        # TIME is a signed interval; wrap it onto the clock face.
        return (datetime.min + timedelta(seconds=int(value.total_seconds()) % 86400)).time()
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("ascii")
    if isinstance(value, str):
        return time.fromisoformat(value.strip())
    raise TypeError(f"Unsupported MySQL TIME value: {value!r}")


def load_json_column(value: Any) -> Any:
    """JSON columns come back as str, bytes or an already decoded dict/list."""

    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value) if value.strip() else None
    return value


def dump_json_column(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False, default=str)
