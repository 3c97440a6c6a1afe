"""Example: drive the service layer directly (no Flask).

Runs one ledger batch through the pipeline, then prints the day's summary for employee 1.
"""

import importlib
from datetime import date

from dotenv import load_dotenv

from config import get_settings_module

from src.timekeeping.timekeeping.container import build_container


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, timekeeping=settings.TIMEKEEPING)

    result = container.materializer.run(100)
    print(result)

    summary = container.summary_service.evaluate(1, date.today())
    print(summary.attendance_status.value, summary)


if __name__ == "__main__":
    main()
