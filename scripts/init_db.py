"""Create the timekeeping database (if needed) and apply database/schema.sql.

Exits 1 when any table the core reads or writes is still missing afterwards.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.timekeeping.timekeeping.database.bootstrap import apply_schema, list_tables
from src.timekeeping.timekeeping.main import SCHEMA_PATH

REQUIRED_TABLES = (
    "employees",
    "work_schedules",
    "ledger_records",
    "attendance_events",
    "daily_attendance_summaries",
    "ledger_health_logs",
)


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=SCHEMA_PATH)
    missing = sorted(set(REQUIRED_TABLES) - set(list_tables(db_config)))

    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    if missing:
        print(f"FAILED: {target} is missing tables: {', '.join(missing)}")
        return 1
    print(f"OK: schema applied to {target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
