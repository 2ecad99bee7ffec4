"""Schema base class and the error envelope shared by every router."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BaseSchema(BaseModel):
    """Reads ORM rows directly; accepts field names or aliases."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ErrorDetail(BaseModel):
    code: str = Field(..., examples=["EVENT_FULL"])
    message: str = Field(..., examples=["Event has reached maximum capacity"])
    details: dict[str, Any] = Field(
        default_factory=dict,
        examples=[{"event_id": "9b1f...", "max_teams": 16}],
    )


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: ErrorDetail
    trace_id: str | None = Field(
        None,
        alias="traceId",
        description="Request id, echoed in the X-Request-ID header",
    )


class SuccessResponse(BaseModel):
    success: bool = True
    message: str


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid input or event not in the required status"},
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
    403: {"model": ErrorResponse, "description": "Caller lacks the role or does not own the resource"},
    404: {"model": ErrorResponse, "description": "Event, ticket or match not found"},
    409: {"model": ErrorResponse, "description": "Event full or participant already registered"},
}
