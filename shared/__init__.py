"""Shared utilities and components for the monitor services."""

from .config import BaseClickHouseConfig, BaseLoggingConfig, BaseServiceConfig
from .constants import EventNames, MonitorEnv, Tables

__all__ = [
    "EventNames",
    "MonitorEnv",
    "Tables",
    "BaseServiceConfig",
    "BaseLoggingConfig",
    "BaseClickHouseConfig",
]
