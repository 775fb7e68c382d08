"""Service configuration from environment variables.

Environment variables:
- TODO_SERVICE_DB: SQLite database path, or ':memory:' (default: todos.db)
- TODO_SERVICE_POOL_SIZE: number of pooled connections (default: 4)
- TODO_SERVICE_POOL_TIMEOUT: seconds to wait for a free connection (default: 5)
- TODO_SERVICE_BUSY_TIMEOUT: seconds SQLite waits on a locked database (default: 5)
- TODO_SERVICE_HOST / TODO_SERVICE_PORT: HTTP bind address (default: 127.0.0.1:8000)
- TODO_SERVICE_LOG_LEVEL: logging level name (default: INFO)
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class Settings:
    """Runtime settings for the todo service."""
    db_path: str = "todos.db"
    pool_size: int = 4
    pool_timeout: float = 5.0
    busy_timeout: float = 5.0
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name, "")
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name, "")
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def get_settings() -> Settings:
    """Build settings from the environment (and a .env file, if present)."""
    load_dotenv()

    settings = Settings(
        db_path=os.getenv("TODO_SERVICE_DB", "") or Settings.db_path,
        pool_size=_env_int("TODO_SERVICE_POOL_SIZE", Settings.pool_size),
        pool_timeout=_env_float("TODO_SERVICE_POOL_TIMEOUT", Settings.pool_timeout),
        busy_timeout=_env_float("TODO_SERVICE_BUSY_TIMEOUT", Settings.busy_timeout),
        host=os.getenv("TODO_SERVICE_HOST", "") or Settings.host,
        port=_env_int("TODO_SERVICE_PORT", Settings.port),
        log_level=(os.getenv("TODO_SERVICE_LOG_LEVEL", "") or Settings.log_level).upper(),
    )
    if settings.pool_size < 1:
        raise ValueError(f"TODO_SERVICE_POOL_SIZE must be at least 1, got {settings.pool_size}")
    if settings.pool_timeout <= 0:
        raise ValueError(f"TODO_SERVICE_POOL_TIMEOUT must be positive, got {settings.pool_timeout}")
    if settings.log_level not in LOG_LEVELS:
        raise ValueError(
            f"TODO_SERVICE_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {settings.log_level!r}"
        )
    return settings
