"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_GRACE_PERIOD_MINUTES = 15
DEFAULT_OVERTIME_THRESHOLD_MINUTES = 0
DEFAULT_DEDUP_WINDOW_SECONDS = 15
DEFAULT_POLL_BATCH_SIZE = 1000
DEFAULT_STALE_AFTER_MINUTES = 5
DEFAULT_HEALTH_HISTORY_LIMIT = 20

DEDUP_REASON_WITHIN_WINDOW = "duplicate_within_window"
