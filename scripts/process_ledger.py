"""Drain the ledger: run materializer batches until a poll comes back empty.

Run from cron (or a systemd timer). Only one instance should run at a time; a
second concurrent run is safe but wasteful because duplicate inserts are
discarded as conflicts.
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.timekeeping.timekeeping.container import build_container
from src.timekeeping.timekeeping.main import configure_logging

logger = logging.getLogger("process_ledger")


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=settings.DB_CONFIG, timekeeping=settings.TIMEKEEPING)

    batches = created = unmatched = 0
    # Unmatched rows stay pending; advance past each batch.
    cursor = None
    while True:
        result = container.materializer.run(from_sequence_id=cursor)
        if result.stats.total == 0:
            break
        batches += 1
        created += result.created
        unmatched += result.unmatched
        cursor = result.last_sequence_id + 1

    logger.info("Ledger drained: batches=%s events_created=%s unmatched=%s", batches, created, unmatched)


if __name__ == "__main__":
    main()
