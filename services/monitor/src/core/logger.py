from __future__ import annotations

import logging

from shared.logging.json import configure_logging as _shared_configure_logging
from shared.logging.logger import is_configured

from .config import settings


def configure_logging(force: bool = False) -> logging.Logger:
    """Install the shared JSON handler on the root logger (idempotent)."""
    root = logging.getLogger()
    if is_configured() and not force:
        return root
    return _shared_configure_logging(
        service=settings.otel_service_name,
        level=settings.app_log_level,
        environment=settings.app_environment,
        redaction_patterns=settings.app_log_redaction_patterns,
    )


def get_logger(name: str) -> logging.Logger:
    """Get preconfigured structured logger"""
    logger = logging.getLogger(name)
    logger.propagate = True
    return logger
