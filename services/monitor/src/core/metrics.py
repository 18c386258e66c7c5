"""Prometheus metrics for the monitor service."""

from shared.metrics import get_counter, get_histogram

SERVICE = "monitor"

ROWS_AGGREGATED = get_counter(
    "rows_aggregated_total", "Event rows folded into dashboard windows", SERVICE
)
ROWS_DROPPED = get_counter(
    "rows_dropped_total",
    "Event rows skipped because no window could be assigned",
    SERVICE,
)
AGGREGATION_LATENCY = get_histogram(
    "aggregation_latency_seconds", "Time spent aggregating one row batch", SERVICE
)
DASHBOARD_QUERY_LATENCY = get_histogram(
    "dashboard_query_latency_seconds",
    "End-to-end latency of dashboard queries",
    SERVICE,
    labelnames=("view",),
)
DASHBOARD_QUERY_ERRORS = get_counter(
    "dashboard_query_errors_total",
    "Dashboard queries that failed",
    SERVICE,
    labelnames=("view",),
)

COLLECT_ACCEPTED = get_counter(
    "collect_accepted_total", "Collect payloads persisted", SERVICE, ("type",)
)
COLLECT_REJECTED = get_counter(
    "collect_rejected_total", "Collect payloads failing validation", SERVICE
)
COLLECT_FAILED = get_counter(
    "collect_failed_total", "Collect payloads that could not be persisted", SERVICE
)
