"""Run one ledger health check. Exit code 2 when the ledger is critical."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.timekeeping.timekeeping.container import build_container
from src.timekeeping.timekeeping.core.enums import HealthStatus
from src.timekeeping.timekeeping.main import configure_logging


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=settings.DB_CONFIG, timekeeping=settings.TIMEKEEPING)

    log = container.health_monitor.run_check()
    print(f"{log.status.value}: {log.notes}")
    return 2 if log.status == HealthStatus.CRITICAL else 0


if __name__ == "__main__":
    sys.exit(main())
