import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from src.api.errors import error_response
from src.api.router import api_router
from src.core.config import settings
from src.core.logger import get_logger
from src.core.tracing import shutdown_tracing
from src.domain.errors import InvalidQueryError
from src.infrastructure.clickhouse.client import ClickHouseClient
from src.infrastructure.clickhouse.repository import MonitorRepository
from src.startup import initialize_application
from src.utils.concurrency import run_blocking
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.utils.retry import retry_async

logger = get_logger("monitor.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    initialize_application()
    logger.info("monitor_service_starting")
    app.state.ready_event = asyncio.Event()
    app.state.clickhouse = await _init_clickhouse_with_retry()
    app.state.repo = MonitorRepository(app.state.clickhouse)
    app.state.ready_event.set()
    try:
        yield
    finally:
        logger.info("monitor_service_stopping")
        app.state.ready_event.clear()
        await run_blocking(app.state.clickhouse.close)
        if settings.otel_enabled:
            shutdown_tracing()


async def _init_clickhouse_with_retry() -> ClickHouseClient:
    async def _connect():
        client = await run_blocking(ClickHouseClient)
        await run_blocking(client.ping)
        return client

    def _on_retry(attempt: int, exc: BaseException, sleep_for: float):
        logger.warning(
            "clickhouse_connect_retry",
            extra={
                "attempt": attempt,
                "error": str(exc),
                "sleep_for": round(sleep_for, 2),
            },
        )

    client = await retry_async(
        _connect,
        retries=settings.clickhouse_connect_retries,
        base_delay=0.5,
        max_delay=8.0,
        jitter=0.2,
        on_retry=_on_retry,
    )
    logger.info("clickhouse_connected", extra={"host": settings.clickhouse_host})
    return client


app = FastAPI(title="Web Monitor API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidQueryError)
async def invalid_query_handler(request: Request, exc: InvalidQueryError):
    return error_response(400, "INVALID_QUERY", str(exc))


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return error_response(404, "NOT_FOUND", "route not found")
    return await http_exception_handler(request, exc)


instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    excluded_handlers=["/docs", "/openapi.json", "/metrics"],
    inprogress_name="monitor_inprogress",
    inprogress_labels=True,
)

instrumentator.instrument(app).expose(app)

app.include_router(api_router)
