import os

_SETTINGS_BY_ENV = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    """Settings module for APP_ENV (development when unset or unknown)."""
    return _SETTINGS_BY_ENV.get(os.getenv("APP_ENV", "development").strip().lower(), "config.development")
