import os

from .config import db_config_from_env

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env(default_database="timekeeping_test")

# Fixed values so tests do not depend on the developer's environment.
TIMEKEEPING = {
    "GRACE_PERIOD_MINUTES": 15,
    "OVERTIME_THRESHOLD_MINUTES": 0,
    "DEDUP_WINDOW_SECONDS": 15,
    "POLL_BATCH_SIZE": 1000,
    "STALE_AFTER_MINUTES": 5,
}

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
