from functools import lru_cache
from zoneinfo import ZoneInfo

from fastapi import Depends, Request
from src.core.config import settings
from src.infrastructure.clickhouse.repository import MonitorRepository
from src.services.collect_service import CollectService
from src.services.dashboard_service import DashboardService


@lru_cache
def get_dashboard_timezone() -> ZoneInfo:
    return ZoneInfo(settings.dashboard_timezone)


def get_repo(request: Request) -> MonitorRepository:
    return request.app.state.repo  # type: ignore[return-value]


def get_dashboard_service(
    repo: MonitorRepository = Depends(get_repo),
) -> DashboardService:
    return DashboardService(repo, tz=get_dashboard_timezone())


def get_collect_service(repo: MonitorRepository = Depends(get_repo)) -> CollectService:
    return CollectService(repo)
