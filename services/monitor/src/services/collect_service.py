from typing import Protocol

from src.core.logger import get_logger
from src.schemas.collect import CollectPayload, ErrorPayload, EventPayload

logger = get_logger("monitor.collect")

_ERROR_TYPE_ALIASES = {
    "runtime": "runtime",
    "promise": "promise",
    "unhandledrejection": "promise",
    "resource": "resource",
    "resource-error": "resource",
}


class CollectSink(Protocol):
    async def insert_event(self, payload: EventPayload) -> None: ...

    async def insert_error(self, payload: ErrorPayload) -> None: ...


def normalize_error_type(raw_type: str | None) -> str | None:
    """Collapse SDK error type spellings so ``error_type`` stays groupable."""
    if not raw_type:
        return None
    trimmed = raw_type.strip()
    if not trimmed:
        return None
    return _ERROR_TYPE_ALIASES.get(trimmed.lower(), trimmed)


class CollectService:
    """Dispatches SDK payloads to event or error persistence."""

    def __init__(self, repository: CollectSink):
        self.repo = repository

    async def handle(self, payload: CollectPayload) -> None:
        if isinstance(payload, EventPayload):
            await self.repo.insert_event(payload)
            return

        data = payload.data.model_copy(
            update={"type": normalize_error_type(payload.data.type)}
        )
        await self.repo.insert_error(payload.model_copy(update={"data": data}))
