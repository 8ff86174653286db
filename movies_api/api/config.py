"""
API configuration loaded from environment or defaults.

Settings are read once into an immutable object; nothing mutates them at
runtime.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from movies_api.database.connection import DEFAULT_DATABASE_URL


def _get_int(key: str, default: int) -> int:
    """Read an integer env var, falling back to the default when unset or invalid."""
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _require(key: str) -> str:
    value = os.getenv(key, "").strip()
    if not value:
        raise ValueError(f"{key} is required")
    return value


@dataclass(frozen=True)
class Settings:
    """Runtime configuration of the service."""

    auth_token: str
    boxoffice_url: str
    boxoffice_api_key: str
    database_url: str = DEFAULT_DATABASE_URL
    boxoffice_timeout_secs: int = 5
    db_pool_size: int = 20
    db_max_overflow: int = 0
    db_pool_recycle_secs: int = 3600
    db_pool_timeout_secs: int = 10
    health_timeout_secs: int = 2
    log_level: str = "INFO"
    log_file: Optional[str] = None
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    def __post_init__(self):
        if self.boxoffice_timeout_secs <= 0:
            raise ValueError("BOXOFFICE_TIMEOUT_SECS must be positive")
        if self.db_pool_size <= 0:
            raise ValueError("DB_POOL_SIZE must be positive")
        if self.db_max_overflow < 0:
            raise ValueError("DB_MAX_OVERFLOW must be non-negative")
        if self.db_pool_timeout_secs <= 0:
            raise ValueError("DB_POOL_TIMEOUT_SECS must be positive")
        if self.health_timeout_secs <= 0:
            raise ValueError("HEALTH_TIMEOUT_SECS must be positive")


def load_settings() -> Settings:
    """
    Build Settings from environment variables.

    Raises:
        ValueError: If a required variable is missing or a value is out of range
    """
    return Settings(
        auth_token=_require("AUTH_TOKEN"),
        boxoffice_url=_require("BOXOFFICE_URL"),
        boxoffice_api_key=_require("BOXOFFICE_API_KEY"),
        database_url=os.getenv("DATABASE_URL", "").strip() or DEFAULT_DATABASE_URL,
        boxoffice_timeout_secs=_get_int("BOXOFFICE_TIMEOUT_SECS", 5),
        db_pool_size=_get_int("DB_POOL_SIZE", 20),
        db_max_overflow=_get_int("DB_MAX_OVERFLOW", 0),
        db_pool_recycle_secs=_get_int("DB_POOL_RECYCLE_SECS", 3600),
        db_pool_timeout_secs=_get_int("DB_POOL_TIMEOUT_SECS", 10),
        health_timeout_secs=_get_int("HEALTH_TIMEOUT_SECS", 2),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_file=os.getenv("LOG_FILE") or None,
        api_host=os.getenv("API_HOST", "0.0.0.0"),
        api_port=_get_int("API_PORT", 8080),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use."""
    return load_settings()
