from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from src.domain.rows import DashboardQuery, MonitorErrorRow, MonitorEventRow
from src.engine.classifier import parse_occurred_at

DAY = "2024-05-01"


def at(hour: int, minute: int = 0, day: str = DAY) -> str:
    """ISO timestamp on the fixture day."""
    return f"{day}T{hour:02d}:{minute:02d}:00Z"


def dt(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 5, 1, hour, minute, tzinfo=timezone.utc)


def request_row(ts: str, duration=None, url="/api/x", method="GET", **props):
    payload = {"url": url, "method": method, **props}
    if duration is not None:
        payload["duration"] = duration
    return MonitorEventRow(occurred_at=ts, event_name="request", props=payload)


def page_view_row(ts: str, url: str):
    return MonitorEventRow(occurred_at=ts, event_name="page-view", props={"url": url})


class FakeRepository:
    """In-memory stand-in for MonitorRepository.

    Event rows are filtered by the inclusive query range like the real one.
    """

    def __init__(self, events=None, errors=None):
        self.events: list[MonitorEventRow] = list(events or [])
        self.errors: list[MonitorErrorRow] = list(errors or [])
        self.event_queries: list[DashboardQuery] = []
        self.error_calls: list[tuple[DashboardQuery, int]] = []
        self.inserted_events = []
        self.inserted_errors = []
        self.fail_with: Exception | None = None

    async def fetch_event_rows(self, query: DashboardQuery):
        if self.fail_with is not None:
            raise self.fail_with
        self.event_queries.append(query)
        selected = []
        for row in self.events:
            ts = parse_occurred_at(row.occurred_at)
            if ts is None or query.start_ms <= ts <= query.end_ms:
                selected.append(row)
        return selected

    async def fetch_recent_errors(self, query: DashboardQuery, limit: int):
        if self.fail_with is not None:
            raise self.fail_with
        self.error_calls.append((query, limit))
        return self.errors[:limit]

    async def insert_event(self, payload):
        if self.fail_with is not None:
            raise self.fail_with
        self.inserted_events.append(payload)

    async def insert_error(self, payload):
        if self.fail_with is not None:
            raise self.fail_with
        self.inserted_errors.append(payload)


@pytest.fixture
def fake_repo():
    return FakeRepository()


@pytest.fixture
def sample_rows():
    """Two hours of traffic starting at 10:00 UTC plus an earlier period."""
    return [
        # previous period (08:00-10:00)
        request_row(at(9, 0), duration=100, url="/api/users"),
        request_row(at(9, 30), duration=100, url="/api/users"),
        # current period (10:00-12:00)
        request_row(at(10, 5), duration=100, url="/api/users", ok=True, status=200),
        request_row(at(10, 20), duration=200, url="/api/users", status=500),
        request_row(
            at(11, 10), duration=300, url="https://shop.example.com/api/orders",
            method="post",
        ),
        page_view_row(at(10, 30), "https://shop.example.com/home?ref=x"),
        page_view_row(at(11, 0), "/home"),
        page_view_row(at(11, 30), "/cart"),
        MonitorEventRow(
            occurred_at=at(10, 40),
            event_name="performance-resource",
            props={
                "resources": [
                    {"name": "app.js", "initiatorType": "script", "duration": 120},
                    {"name": "logo.png", "initiatorType": "IMAGE", "duration": 80},
                ]
            },
        ),
    ]


@pytest.fixture
def app_client(fake_repo):
    """TestClient with the repository dependency replaced by the fake."""
    from src.api.dependencies import get_repo
    from src.main import app

    app.dependency_overrides[get_repo] = lambda: fake_repo
    yield TestClient(app)
    app.dependency_overrides.clear()
