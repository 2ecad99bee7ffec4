"""API request schemas."""

from datetime import datetime, timezone
from typing import Any

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)

from tourney.models.event import BracketType, EventStatus

_URI = TypeAdapter(AnyUrl)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _check_uri(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        _URI.validate_python(value)
    except PydanticValidationError:
        raise ValueError("must be a valid URI")
    return value


def _check_future(value: datetime | None) -> datetime | None:
    if value is not None and value <= datetime.now(timezone.utc):
        raise ValueError("must be in the future")
    return value


# =============================================================================
# Event Requests
# =============================================================================


class EventFields(BaseModel):
    """The full validated field set of an event.

    Used for creation and to re-validate the merged result of an update.
    The future check on ``start_time`` lives on the request models because
    it only applies to values the caller is submitting.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: str = Field(..., min_length=5, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    game: str = Field(..., min_length=1, max_length=100)
    start_time: datetime
    end_time: datetime
    bracket_type: BracketType = BracketType.SINGLE_ELIMINATION
    organizer_checkout_url: str | None = Field(default=None, max_length=2048)
    max_teams: int | None = Field(default=None, ge=2, le=128, strict=True)

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return as_utc(v)

    @field_validator("organizer_checkout_url")
    @classmethod
    def validate_checkout_url(cls, v: str | None) -> str | None:
        return _check_uri(v)

    @model_validator(mode="after")
    def validate_time_window(self) -> "EventFields":
        """end_time must be strictly after start_time."""
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class CreateEventRequest(EventFields):
    """Event creation request."""

    @field_validator("start_time")
    @classmethod
    def validate_start_in_future(cls, v: datetime) -> datetime:
        return _check_future(as_utc(v))


class UpdateEventRequest(BaseModel):
    """Event update patch. Unknown fields are rejected."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: str | None = Field(default=None, min_length=5, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    game: str | None = Field(default=None, min_length=1, max_length=100)
    start_time: datetime | None = None
    end_time: datetime | None = None
    bracket_type: BracketType | None = None
    organizer_checkout_url: str | None = Field(default=None, max_length=2048)
    max_teams: int | None = Field(default=None, ge=2, le=128, strict=True)
    status: EventStatus | None = None

    @field_validator("start_time")
    @classmethod
    def validate_start_in_future(cls, v: datetime | None) -> datetime | None:
        return _check_future(as_utc(v)) if v is not None else None

    @field_validator("end_time")
    @classmethod
    def normalize_end_time(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None

    @field_validator("organizer_checkout_url")
    @classmethod
    def validate_checkout_url(cls, v: str | None) -> str | None:
        return _check_uri(v)

    def changes(self) -> dict[str, Any]:
        """Fields the caller actually sent, including explicit nulls."""
        return self.model_dump(exclude_unset=True)


# =============================================================================
# Match Requests
# =============================================================================


class GenerateBracketRequest(BaseModel):
    """Bracket generation request.

    When ``participant_ids`` is omitted the event roster is used.
    """

    participant_ids: list[str] | None = Field(default=None, min_length=0)


class MatchResultRequest(BaseModel):
    """Match result report.

    Either name the winner or send both scores; with scores only the
    higher score wins.
    """

    winner_id: str | None = None
    player1_score: int | None = Field(default=None, ge=0)
    player2_score: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_outcome(self) -> "MatchResultRequest":
        has_scores = self.player1_score is not None and self.player2_score is not None
        if self.winner_id is None and not has_scores:
            raise ValueError("winner_id or both scores are required")
        return self


# =============================================================================
# Webhook Requests
# =============================================================================


class PaymentWebhookRequest(BaseModel):
    """Payment provider callback body."""

    model_config = ConfigDict(extra="allow")

    external_payment_ref: str | None = None
    status: str | None = None
    amount: Any = None
    currency: str | None = None
