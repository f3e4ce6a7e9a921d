"""Runtime infrastructure shared by the locator services."""

from locator_devkit.config import ServiceSettings, load_settings
from locator_devkit.db import (
    AsyncDatabaseManager,
    Base,
    create_all_tables,
    create_async_engine,
    is_transient_db_error,
    normalize_postgres_dsn,
)
from locator_devkit.observability import configure_logging, configure_otel, configure_probe_access_log_filter
from locator_devkit.redis import AsyncRedisManager, create_redis_client

__all__ = [
    "AsyncDatabaseManager",
    "AsyncRedisManager",
    "Base",
    "ServiceSettings",
    "configure_logging",
    "configure_otel",
    "configure_probe_access_log_filter",
    "create_all_tables",
    "create_async_engine",
    "create_redis_client",
    "is_transient_db_error",
    "load_settings",
    "normalize_postgres_dsn",
]
