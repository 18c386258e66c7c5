"""Row source and sink for the monitor tables.

Reads only filter, order and cap rows; all aggregation happens in the engine.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from uuid6 import uuid7

from shared.constants import Tables
from src.core.config import settings
from src.core.logger import get_logger
from src.domain.rows import (
    DashboardQuery,
    MonitorErrorRow,
    MonitorEventRow,
    from_epoch_ms,
    iso_label,
)
from src.infrastructure.clickhouse.client import ClickHouseClient
from src.schemas.collect import ErrorPayload, EventPayload
from src.utils.concurrency import run_blocking

logger = get_logger("monitor.repository")

_RANGE_CLAUSE = (
    "occurred_at >= fromUnixTimestamp64Milli(toInt64(%(from_ms)s), 'UTC') "
    "AND occurred_at <= fromUnixTimestamp64Milli(toInt64(%(to_ms)s), 'UTC')"
)


def _where(query: DashboardQuery) -> tuple[str, dict[str, Any]]:
    conditions = [_RANGE_CLAUSE]
    params: dict[str, Any] = {"from_ms": query.start_ms, "to_ms": query.end_ms}
    if query.app_id:
        conditions.append("app_id = %(app_id)s")
        params["app_id"] = query.app_id
    if query.env:
        conditions.append("env = %(env)s")
        params["env"] = query.env.value
    return " AND ".join(conditions), params


def decode_props(raw: Any) -> dict[str, Any] | None:
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str) or not raw:
        return None
    try:
        decoded = json.loads(raw)
    except ValueError:
        return None
    return decoded if isinstance(decoded, dict) else None


class MonitorRepository:
    def __init__(self, client: ClickHouseClient, event_row_limit: int | None = None):
        self.client = client
        self.event_row_limit = event_row_limit or settings.event_row_limit

    async def fetch_event_rows(self, query: DashboardQuery) -> list[MonitorEventRow]:
        where, params = _where(query)
        params["limit"] = self.event_row_limit
        sql = f"""
        SELECT toUnixTimestamp64Milli(occurred_at), event_name, props, app_id, env
        FROM {Tables.EVENTS}
        WHERE {where}
        ORDER BY occurred_at ASC
        LIMIT %(limit)s
        """
        rows = await run_blocking(self.client.query, sql, params)
        if len(rows) >= self.event_row_limit:
            logger.warning(
                "event_row_limit_reached",
                extra={"limit": self.event_row_limit, "from_ms": query.start_ms},
            )
        return [
            MonitorEventRow(
                occurred_at=occurred_ms,
                event_name=event_name,
                props=decode_props(props),
                app_id=app_id,
                env=env,
            )
            for occurred_ms, event_name, props, app_id, env in rows
        ]

    async def fetch_recent_errors(
        self, query: DashboardQuery, limit: int
    ) -> list[MonitorErrorRow]:
        where, params = _where(query)
        params["limit"] = limit
        sql = f"""
        SELECT toString(id), toUnixTimestamp64Milli(occurred_at), message,
               error_type, filename, lineno, colno, stack, app_id, env
        FROM {Tables.ERRORS}
        WHERE {where}
        ORDER BY occurred_at DESC
        LIMIT %(limit)s
        """
        rows = await run_blocking(self.client.query, sql, params)
        return [
            MonitorErrorRow(
                id=row[0],
                occurred_at=iso_label(row[1]),
                message=row[2],
                error_type=row[3],
                filename=row[4],
                lineno=row[5],
                colno=row[6],
                stack=row[7],
                app_id=row[8],
                env=row[9],
            )
            for row in rows
        ]

    async def insert_event(self, payload: EventPayload) -> None:
        row = {
            "event_id": uuid7(),
            **_base_columns(payload),
            "event_name": payload.data.name,
            "props": json.dumps(payload.data.props or {}, default=str),
        }
        await run_blocking(self.client.insert_rows, Tables.EVENTS, [row])

    async def insert_error(self, payload: ErrorPayload) -> None:
        data = payload.data
        row = {
            "id": uuid7(),
            **_base_columns(payload),
            "message": data.message,
            "stack": data.stack,
            "error_type": data.type,
            "filename": data.filename,
            "lineno": data.lineno,
            "colno": data.colno,
        }
        await run_blocking(self.client.insert_rows, Tables.ERRORS, [row])


def _base_columns(payload: EventPayload | ErrorPayload) -> dict[str, Any]:
    return {
        "app_id": payload.app_id,
        "env": payload.env.value if payload.env else None,
        "release": payload.release,
        "user_id": payload.user_id,
        "occurred_at": from_epoch_ms(int(payload.timestamp)),
        "received_at": datetime.now(timezone.utc),
        "raw": payload.model_dump_json(by_alias=True, exclude_none=True),
    }
