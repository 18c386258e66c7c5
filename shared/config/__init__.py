"""Shared configuration base classes.

Provides common configuration patterns used across all services to reduce
duplication and ensure consistency.
"""

from pydantic_settings import BaseSettings


class BaseLoggingConfig(BaseSettings):
    """Common logging configuration for all services."""

    app_log_level: str = "INFO"
    app_log_redaction_patterns: list[str] = [
        "password",
        "token",
        "secret",
        "authorization",
        "cookie",
    ]
    app_environment: str = "production"


class BaseClickHouseConfig(BaseSettings):
    """Common ClickHouse connection settings."""

    clickhouse_host: str = "clickhouse"
    clickhouse_port: int = 9000
    clickhouse_db: str = "monitor"
    clickhouse_user: str = "admin"
    clickhouse_password: str = "admin"


class BaseServiceConfig(BaseLoggingConfig, BaseClickHouseConfig):
    """Base configuration combining logging and ClickHouse settings.

    Services should inherit from this and add their own specific settings.
    The otel_service_name should be overridden by each service.
    """

    otel_service_name: str = "unknown"  # Should be overridden by service


__all__ = ["BaseLoggingConfig", "BaseClickHouseConfig", "BaseServiceConfig"]
