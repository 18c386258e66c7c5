import time
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, TypeVar

from fastapi import APIRouter, Depends, Query
from src.api.dependencies import get_dashboard_service
from src.api.errors import error_response
from src.core.config import settings
from src.core.logger import get_logger
from src.core.metrics import DASHBOARD_QUERY_ERRORS, DASHBOARD_QUERY_LATENCY
from src.domain.errors import InvalidQueryError
from src.domain.models import (
    DashboardCharts,
    DashboardErrors,
    DashboardOverview,
    DashboardRoutes,
)
from src.domain.rows import DashboardQuery, ensure_aware
from src.services.dashboard_service import DashboardService

from shared.constants import MonitorEnv

T = TypeVar("T")

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])
logger = get_logger("api.dashboard")


def _parse_datetime(raw: str) -> datetime:
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return ensure_aware(datetime.fromisoformat(text))
    except ValueError as exc:
        raise InvalidQueryError(
            "Invalid query: from/to must be valid datetime"
        ) from exc


def parse_dashboard_query(
    from_: str | None = Query(None, alias="from"),
    to: str | None = Query(None),
    app_id: str | None = Query(None, alias="appId"),
    env: str | None = Query(None),
) -> DashboardQuery:
    """Defaults to the last 24 hours; unknown ``env`` values are ignored."""
    end = _parse_datetime(to) if to is not None else datetime.now(timezone.utc)
    start = (
        _parse_datetime(from_)
        if from_ is not None
        else end - timedelta(hours=settings.default_range_hours)
    )
    return DashboardQuery(
        start=start, end=end, app_id=app_id or None, env=MonitorEnv.parse(env)
    )


def clamp_limit(raw: str | None, default: int, upper: int) -> int:
    try:
        value = int(float(raw)) if raw is not None else default
    except (ValueError, OverflowError):
        value = default
    return min(max(value, 1), upper)


async def _build_view(view: str, build: Callable[[], Awaitable[T]]):
    start = time.perf_counter()
    try:
        return await build()
    except Exception as e:  # noqa: BLE001
        DASHBOARD_QUERY_ERRORS.labels(view=view).inc()
        logger.exception(
            "dashboard_query_failed",
            extra={"view": view, "error_type": type(e).__name__},
        )
        return error_response(
            500,
            f"DASHBOARD_{view.upper()}_ERROR",
            str(e) or f"failed to load dashboard {view}",
        )
    finally:
        DASHBOARD_QUERY_LATENCY.labels(view=view).observe(time.perf_counter() - start)


@router.get(
    "/overview", response_model=DashboardOverview, response_model_exclude_none=True
)
async def overview(
    query: DashboardQuery = Depends(parse_dashboard_query),
    svc: DashboardService = Depends(get_dashboard_service),
):
    return await _build_view("overview", lambda: svc.get_overview(query))


@router.get("/charts", response_model=DashboardCharts)
async def charts(
    query: DashboardQuery = Depends(parse_dashboard_query),
    svc: DashboardService = Depends(get_dashboard_service),
):
    return await _build_view("charts", lambda: svc.get_charts(query))


@router.get(
    "/errors", response_model=DashboardErrors, response_model_exclude_none=True
)
async def errors(
    query: DashboardQuery = Depends(parse_dashboard_query),
    limit: str | None = Query(None),
    svc: DashboardService = Depends(get_dashboard_service),
):
    size = clamp_limit(limit, settings.dashboard_recent_errors, settings.errors_limit_max)

    async def build() -> DashboardErrors:
        return DashboardErrors(items=await svc.get_errors(query, size))

    return await _build_view("errors", build)


@router.get("/routes", response_model=DashboardRoutes)
async def routes(
    query: DashboardQuery = Depends(parse_dashboard_query),
    route_type: str | None = Query(None, alias="type"),
    limit: str | None = Query(None),
    svc: DashboardService = Depends(get_dashboard_service),
):
    kind = "page" if route_type == "page" else "api"
    size = clamp_limit(limit, settings.dashboard_top_n, settings.routes_limit_max)
    return await _build_view("routes", lambda: svc.get_routes(query, kind, size))
