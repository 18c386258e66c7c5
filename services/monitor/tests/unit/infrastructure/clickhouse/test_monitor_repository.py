import json
from unittest.mock import MagicMock

import pytest
from conftest import dt
from src.domain.rows import DashboardQuery
from src.infrastructure.clickhouse.repository import MonitorRepository, decode_props
from src.schemas.collect import collect_payload_adapter

from shared.constants import MonitorEnv, Tables

# 2024-05-01T10:00:00Z
TEN_AM_MS = 1714557600000


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def repo(client):
    return MonitorRepository(client, event_row_limit=100)


@pytest.mark.asyncio
async def test_fetch_event_rows_filters_by_range(repo, client):
    client.query.return_value = [
        (TEN_AM_MS, "request", '{"url": "/api/x"}', "shop", "prod"),
        (TEN_AM_MS + 1, "page-view", "not json", None, None),
    ]
    query = DashboardQuery(start=dt(10), end=dt(12))

    rows = await repo.fetch_event_rows(query)

    sql, params = client.query.call_args.args
    assert Tables.EVENTS in sql
    assert "ORDER BY occurred_at ASC" in sql
    assert params == {
        "from_ms": TEN_AM_MS,
        "to_ms": TEN_AM_MS + 2 * 3600 * 1000,
        "limit": 100,
    }
    assert rows[0].occurred_at == TEN_AM_MS
    assert rows[0].props == {"url": "/api/x"}
    assert rows[1].props is None


@pytest.mark.asyncio
async def test_fetch_event_rows_adds_optional_filters(repo, client):
    client.query.return_value = []
    query = DashboardQuery(
        start=dt(10), end=dt(12), app_id="shop", env=MonitorEnv.PROD
    )

    await repo.fetch_event_rows(query)

    sql, params = client.query.call_args.args
    assert "app_id = %(app_id)s" in sql
    assert "env = %(env)s" in sql
    assert params["app_id"] == "shop"
    assert params["env"] == "prod"


@pytest.mark.asyncio
async def test_fetch_recent_errors(repo, client):
    client.query.return_value = [
        ("0190-id", TEN_AM_MS, "boom", "runtime", "a.js", 1, 2, "stack", None, None)
    ]

    (row,) = await repo.fetch_recent_errors(DashboardQuery(start=dt(10), end=dt(12)), 5)

    sql, params = client.query.call_args.args
    assert "ORDER BY occurred_at DESC" in sql
    assert params["limit"] == 5
    assert row.id == "0190-id"
    assert row.occurred_at == "2024-05-01T10:00:00.000Z"
    assert row.error_type == "runtime"
    assert (row.lineno, row.colno) == (1, 2)


@pytest.mark.asyncio
async def test_insert_event(repo, client):
    payload = collect_payload_adapter.validate_python(
        {
            "type": "event",
            "timestamp": TEN_AM_MS,
            "appId": "shop",
            "env": "dev",
            "data": {"name": "request", "props": {"duration": 5}},
        }
    )

    await repo.insert_event(payload)

    table, (row,) = client.insert_rows.call_args.args
    assert table == Tables.EVENTS
    assert row["event_name"] == "request"
    assert json.loads(row["props"]) == {"duration": 5}
    assert row["app_id"] == "shop"
    assert row["env"] == "dev"
    assert row["occurred_at"] == dt(10)
    assert json.loads(row["raw"])["appId"] == "shop"
    assert row["event_id"].version == 7


@pytest.mark.asyncio
async def test_insert_error(repo, client):
    payload = collect_payload_adapter.validate_python(
        {
            "type": "error",
            "timestamp": TEN_AM_MS,
            "data": {"message": "boom", "type": "runtime", "lineno": 4},
        }
    )

    await repo.insert_error(payload)

    table, (row,) = client.insert_rows.call_args.args
    assert table == Tables.ERRORS
    assert row["message"] == "boom"
    assert row["error_type"] == "runtime"
    assert row["lineno"] == 4
    assert row["env"] is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('{"a": 1}', {"a": 1}),
        ({"a": 1}, {"a": 1}),
        ("[1, 2]", None),
        ("", None),
        (None, None),
        ("{broken", None),
    ],
)
def test_decode_props(raw, expected):
    assert decode_props(raw) == expected
