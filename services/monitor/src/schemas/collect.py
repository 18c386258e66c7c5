"""Payloads posted by the browser SDK to the collect endpoint."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from shared.constants import MonitorEnv
from src.domain.errors import InvalidPayloadError


class _SdkModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EventData(_SdkModel):
    name: str = Field(..., min_length=1, strict=True, description="Event name")
    props: dict[str, Any] | None = Field(None, description="Free-form event fields")


class ErrorData(_SdkModel):
    message: str = Field(..., min_length=1, strict=True)
    stack: str | None = None
    type: str | None = Field(None, description="runtime | promise | resource | ...")
    filename: str | None = None
    lineno: int | None = None
    colno: int | None = None


class _BasePayload(_SdkModel):
    timestamp: float = Field(
        ..., strict=True, allow_inf_nan=False, description="Epoch-ms on the client"
    )
    app_id: str | None = None
    env: MonitorEnv | None = None
    release: str | None = None
    user_id: str | None = None


class EventPayload(_BasePayload):
    type: Literal["event"]
    data: EventData


class ErrorPayload(_BasePayload):
    type: Literal["error"]
    data: ErrorData


CollectPayload = Annotated[
    Union[EventPayload, ErrorPayload], Field(discriminator="type")
]

collect_payload_adapter: TypeAdapter[CollectPayload] = TypeAdapter(CollectPayload)


def parse_collect_payload(body: Any) -> CollectPayload:
    try:
        return collect_payload_adapter.validate_python(body)
    except ValidationError as exc:
        raise InvalidPayloadError(
            f"payload does not match monitor-sdk schema ({exc.error_count()} errors)"
        ) from exc
