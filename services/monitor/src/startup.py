from src.core.config import settings
from src.core.logger import configure_logging, get_logger

logger = get_logger("startup")


def initialize_application():
    """Configure logging and (optionally) tracing before serving traffic."""
    configure_logging()
    if settings.otel_enabled:
        from src.core.tracing import configure_tracing

        configure_tracing()
    logger.info(
        "application_initialized",
        extra={
            "otel_service": settings.otel_service_name,
            "tracing": settings.otel_enabled,
            "dashboard_timezone": settings.dashboard_timezone,
            "event_row_limit": settings.event_row_limit,
        },
    )
