"""Dashboard read path: fetch row batches, run the engine, shape responses."""

from __future__ import annotations

import asyncio
import time
from datetime import timezone, tzinfo
from typing import Literal, Protocol, Sequence

from opentelemetry import trace

from src.core.config import settings
from src.core.logger import get_logger
from src.core.metrics import AGGREGATION_LATENCY, ROWS_AGGREGATED, ROWS_DROPPED
from src.domain.models import (
    DashboardCharts,
    DashboardOverview,
    DashboardRoutes,
    ErrorLog,
)
from src.domain.rows import DashboardQuery, MonitorErrorRow, MonitorEventRow
from src.engine.aggregator import AggregationResult, aggregate_rows
from src.engine.charts import build_charts
from src.engine.kpi import build_dashboard_kpis, build_kpi_trends
from src.engine.ranking import (
    to_route_metrics,
    to_slow_resource_metrics,
    to_slow_route_metrics,
)
from src.utils.concurrency import run_blocking

RouteType = Literal["api", "page"]

logger = get_logger("monitor.dashboard")
tracer = trace.get_tracer(__name__)


class EventRowSource(Protocol):
    async def fetch_event_rows(
        self, query: DashboardQuery
    ) -> list[MonitorEventRow]: ...

    async def fetch_recent_errors(
        self, query: DashboardQuery, limit: int
    ) -> list[MonitorErrorRow]: ...


def to_error_logs(rows: Sequence[MonitorErrorRow]) -> list[ErrorLog]:
    return [
        ErrorLog(
            id=str(row.id) if row.id is not None else f"{row.occurred_at}-{idx}",
            type=row.error_type or "UnknownError",
            message=row.message,
            timestamp=row.occurred_at,
            filename=row.filename,
            lineno=row.lineno,
            colno=row.colno,
            stack=row.stack,
        )
        for idx, row in enumerate(rows)
    ]


class DashboardService:
    """Builds overview, chart, route and error views for a query.

    Every call re-reads its rows and recomputes from scratch.
    """

    def __init__(
        self,
        repository: EventRowSource,
        tz: tzinfo = timezone.utc,
        top_n: int = settings.dashboard_top_n,
        recent_errors: int = settings.dashboard_recent_errors,
    ):
        self.repo = repository
        self.tz = tz
        self.top_n = top_n
        self.recent_errors = recent_errors

    def aggregate(
        self, rows: Sequence[MonitorEventRow], query: DashboardQuery
    ) -> AggregationResult:
        start = time.perf_counter()
        with tracer.start_as_current_span("dashboard.aggregate") as span:
            result = aggregate_rows(rows, query, self.tz)
            span.set_attribute("monitor.rows", len(rows))
            span.set_attribute("monitor.windows", len(result.buckets))
        AGGREGATION_LATENCY.observe(time.perf_counter() - start)
        ROWS_AGGREGATED.inc(result.rows_aggregated)
        if result.rows_dropped:
            ROWS_DROPPED.inc(result.rows_dropped)
            logger.debug(
                "rows_dropped",
                extra={"dropped": result.rows_dropped, "total": len(rows)},
            )
        return result

    async def get_overview(self, query: DashboardQuery) -> DashboardOverview:
        previous_query = query.previous_period()
        events, previous_events, errors = await asyncio.gather(
            self.repo.fetch_event_rows(query),
            self.repo.fetch_event_rows(previous_query),
            self.repo.fetch_recent_errors(query, self.recent_errors),
        )
        current, previous = await asyncio.gather(
            run_blocking(self.aggregate, events, query),
            run_blocking(self.aggregate, previous_events, previous_query),
        )

        kpis = build_dashboard_kpis(current.buckets, current.global_durations)
        previous_kpis = build_dashboard_kpis(
            previous.buckets, previous.global_durations
        )
        overview = DashboardOverview(
            kpis=kpis,
            kpi_trends=build_kpi_trends(kpis, previous_kpis),
            recent_errors=to_error_logs(errors),
            top_api_routes=to_route_metrics(current.api_routes, self.top_n),
            top_slow_requests=to_slow_route_metrics(
                current.request_durations, self.top_n
            ),
            top_slow_resources=to_slow_resource_metrics(
                current.resource_durations, self.top_n
            ),
            top_page_routes=to_route_metrics(current.page_routes, self.top_n),
        )
        logger.info(
            "dashboard_overview_built",
            extra={
                "rows": len(events),
                "previous_rows": len(previous_events),
                "requests": kpis.requests,
                "app_id": query.app_id,
            },
        )
        return overview

    async def get_charts(self, query: DashboardQuery) -> DashboardCharts:
        events = await self.repo.fetch_event_rows(query)
        result = await run_blocking(self.aggregate, events, query)
        return build_charts(result.buckets)

    async def get_routes(
        self, query: DashboardQuery, route_type: RouteType = "api", limit: int = 10
    ) -> DashboardRoutes:
        events = await self.repo.fetch_event_rows(query)
        result = await run_blocking(self.aggregate, events, query)
        counter = result.api_routes if route_type == "api" else result.page_routes
        return DashboardRoutes(type=route_type, routes=to_route_metrics(counter, limit))

    async def get_errors(self, query: DashboardQuery, limit: int = 20) -> list[ErrorLog]:
        rows = await self.repo.fetch_recent_errors(query, limit)
        return to_error_logs(rows)
