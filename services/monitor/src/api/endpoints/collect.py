from fastapi import APIRouter, Depends, Request, Response, status
from src.api.dependencies import get_collect_service
from src.api.errors import error_response
from src.core.logger import get_logger
from src.core.metrics import COLLECT_ACCEPTED, COLLECT_FAILED, COLLECT_REJECTED
from src.schemas.collect import parse_collect_payload
from src.services.collect_service import CollectService

router = APIRouter(prefix="/api/v1/collect", tags=["collect"])
logger = get_logger("api.collect")


@router.post(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Collect SDK event or error",
    response_description="Payload persisted",
)
async def collect(request: Request, svc: CollectService = Depends(get_collect_service)):
    try:
        payload = parse_collect_payload(await request.json())
    except ValueError as e:  # malformed JSON or InvalidPayloadError
        COLLECT_REJECTED.inc()
        logger.info("collect_payload_rejected", extra={"reason": str(e)})
        return error_response(
            400, "INVALID_PAYLOAD", "payload does not match monitor-sdk schema"
        )

    try:
        await svc.handle(payload)
    except Exception as e:  # noqa: BLE001
        COLLECT_FAILED.inc()
        logger.error(
            "collect_persist_failed",
            extra={
                "payload_type": payload.type,
                "error_type": type(e).__name__,
                "error": str(e),
            },
        )
        return error_response(
            500,
            "COLLECT_FAILED",
            "failed to persist collect payload",
            detail=str(e) or "unknown error",
        )

    COLLECT_ACCEPTED.labels(type=payload.type).inc()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
