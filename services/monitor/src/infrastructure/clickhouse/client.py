"""ClickHouse client wrapper."""

from __future__ import annotations

import threading
from typing import Any

from clickhouse_driver import Client
from src.core.config import settings
from src.infrastructure.clickhouse.ddl import ALL_DDLS


class ClickHouseClient:
    def __init__(self):
        self.client = Client(
            host=settings.clickhouse_host,
            port=settings.clickhouse_port,
            user=settings.clickhouse_user,
            password=settings.clickhouse_password,
            database=settings.clickhouse_db,
        )
        # clickhouse-driver raises PartiallyConsumedQueryError when queries
        # overlap on one connection; reads and inserts arrive from several
        # asyncio.to_thread workers, so every call is serialized.
        self._lock = threading.RLock()
        self._ensure_tables()

    def _ensure_tables(self) -> None:
        for ddl in ALL_DDLS:
            self.client.execute(ddl)

    def ping(self) -> bool:
        with self._lock:
            return self.client.execute("SELECT 1") == [(1,)]

    def insert_rows(self, table: str, rows: list[dict]) -> None:
        if not rows:
            return
        # Column order is taken from the first row; ClickHouse expects
        # positional tuples
        columns = list(rows[0].keys())
        query = f"INSERT INTO {table} ({', '.join(columns)}) VALUES"
        data = [tuple(r.get(col) for col in columns) for r in rows]
        with self._lock:
            self.client.execute(query, data)

    def query(self, query: str, params: dict[str, Any]) -> list[tuple]:
        with self._lock:
            return self.client.execute(query, params)

    def close(self) -> None:
        with self._lock:
            self.client.disconnect()
