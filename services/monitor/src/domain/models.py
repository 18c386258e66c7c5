"""Response models of the dashboard API.

Field names are snake_case in Python and serialised in camelCase, which is
what the dashboard front-end consumes.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DashboardKpi(CamelModel):
    requests: int
    error_rate: float
    p75_latency: float
    p95_latency: float
    p99_latency: float


class DashboardKpiTrends(CamelModel):
    """Percent change of each KPI against the previous period."""

    requests: float
    error_rate: float
    p75_latency: float
    p95_latency: float
    p99_latency: float


class RouteMetric(CamelModel):
    path: str
    percentage: float


class SlowRouteMetric(CamelModel):
    path: str
    # p95 of the samples; the name is part of the published contract.
    avg_duration_ms: float
    request_count: int


class SlowResourceMetric(CamelModel):
    name: str
    initiator_type: str
    avg_duration_ms: float
    sample_count: int


class ErrorLog(CamelModel):
    id: str
    type: str
    message: str
    timestamp: str
    filename: str | None = None
    lineno: int | None = None
    colno: int | None = None
    stack: str | None = None


class RequestErrorTrendPoint(CamelModel):
    time_window: str
    requests: int
    error_rate: float


class PercentileTrendPoint(CamelModel):
    time_window: str
    p75: float
    p95: float
    p99: float


class FcpLcpTrendPoint(CamelModel):
    time_window: str
    fcp_p75: float
    fcp_p90: float
    fcp_p99: float
    lcp_p75: float
    lcp_p90: float
    lcp_p99: float


class ClsTrendPoint(CamelModel):
    time_window: str
    cls_p75: float
    cls_p90: float
    cls_p99: float


class DashboardOverview(CamelModel):
    kpis: DashboardKpi
    kpi_trends: DashboardKpiTrends
    recent_errors: list[ErrorLog]
    top_api_routes: list[RouteMetric]
    top_slow_requests: list[SlowRouteMetric]
    top_slow_resources: list[SlowResourceMetric]
    top_page_routes: list[RouteMetric]


class DashboardCharts(CamelModel):
    request_error_trend: list[RequestErrorTrendPoint]
    latency_percentile_trend: list[PercentileTrendPoint]
    resource_percentile_trend: list[PercentileTrendPoint]
    fcp_lcp_trend: list[FcpLcpTrendPoint]
    cls_trend: list[ClsTrendPoint]


class DashboardRoutes(CamelModel):
    type: str
    routes: list[RouteMetric]


class DashboardErrors(CamelModel):
    items: list[ErrorLog]
