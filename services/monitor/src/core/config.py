from shared.config import BaseServiceConfig


class Settings(BaseServiceConfig):
    # Query limits
    event_row_limit: int = 20_000  # hard cap per fetched batch
    dashboard_top_n: int = 10
    dashboard_recent_errors: int = 20
    errors_limit_max: int = 100
    routes_limit_max: int = 50
    default_range_hours: int = 24

    # Windows
    dashboard_timezone: str = "UTC"  # daily buckets align to midnight here

    # HTTP
    cors_allowed_origins: list[str] = ["*"]
    cors_allow_credentials: bool = False

    # Tracing
    otel_enabled: bool = False
    otel_exporter_endpoint: str = "http://jaeger:4317"
    otel_sample_ratio: float = 1.0

    # Startup
    clickhouse_connect_retries: int = 6

    otel_service_name: str = "monitor"
    app_environment: str = "production"


settings = Settings()
