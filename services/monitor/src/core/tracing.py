"""OpenTelemetry setup for the dashboard read path.

Spans are only produced when ``OTEL_ENABLED`` is set; the aggregation span in
``DashboardService.aggregate`` is the main consumer.
"""

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from src.core.config import settings
from src.core.logger import get_logger

logger = get_logger("monitor.tracing")


def configure_tracing() -> TracerProvider:
    """Install a batching OTLP tracer provider sampled at ``otel_sample_ratio``."""
    resource = Resource.create(
        {
            "service.name": settings.otel_service_name,
            "service.namespace": "web-monitor",
            "deployment.environment": settings.app_environment,
            "monitor.dashboard_timezone": settings.dashboard_timezone,
        }
    )
    provider = TracerProvider(
        resource=resource,
        sampler=ParentBased(TraceIdRatioBased(settings.otel_sample_ratio)),
    )
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_exporter_endpoint))
    )
    trace.set_tracer_provider(provider)
    logger.info(
        "tracing_configured",
        extra={
            "endpoint": settings.otel_exporter_endpoint,
            "sample_ratio": settings.otel_sample_ratio,
        },
    )
    return provider


def shutdown_tracing() -> None:
    """Flush pending spans; no-op when the SDK provider was never installed."""
    provider = trace.get_tracer_provider()
    if isinstance(provider, TracerProvider):
        provider.shutdown()
