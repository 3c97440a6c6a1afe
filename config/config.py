"""Shared settings helpers: every environment module reads the same variables."""

import os


def db_config_from_env(*, default_password: str = "", default_database: str = "timekeeping_db") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", default_database),
    }


def timekeeping_from_env() -> dict:
    # Defaults mirror core/constants.py.
    return {
        "GRACE_PERIOD_MINUTES": int(os.getenv("GRACE_PERIOD_MINUTES", "15")),
        "OVERTIME_THRESHOLD_MINUTES": int(os.getenv("OVERTIME_THRESHOLD_MINUTES", "0")),
        "DEDUP_WINDOW_SECONDS": int(os.getenv("DEDUP_WINDOW_SECONDS", "15")),
        "POLL_BATCH_SIZE": int(os.getenv("POLL_BATCH_SIZE", "1000")),
        "STALE_AFTER_MINUTES": int(os.getenv("STALE_AFTER_MINUTES", "5")),
    }
