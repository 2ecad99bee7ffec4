"""Event model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourney.models.base import Base, TimestampMixin, UUIDMixin


class EventStatus(str, Enum):
    """Event lifecycle status."""

    DRAFT = "draft"  # Not visible publicly
    PUBLISHED = "published"  # Open for registration
    LIVE = "live"  # Registration closed, bracket in play
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BracketType(str, Enum):
    """Competition format."""

    SINGLE_ELIMINATION = "single_elimination"
    DOUBLE_ELIMINATION = "double_elimination"
    ROUND_ROBIN = "round_robin"
    SWISS = "swiss"


ACTIVE_EVENT_STATUSES = (EventStatus.PUBLISHED.value, EventStatus.LIVE.value)


class Event(Base, UUIDMixin, TimestampMixin):
    """Competitive event published by an organizer."""

    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint(
            "max_teams IS NULL OR current_teams <= max_teams",
            name="ck_events_capacity",
        ),
        CheckConstraint("end_time > start_time", name="ck_events_time_window"),
    )

    # Owner (identity lives in an external auth service)
    organizer_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )

    # Basic info
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    game: Mapped[str] = mapped_column(String(100), nullable=False)

    # Schedule
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    end_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    # Format
    bracket_type: Mapped[str] = mapped_column(
        String(32),
        default=BracketType.SINGLE_ELIMINATION.value,
        nullable=False,
    )
    organizer_checkout_url: Mapped[str | None] = mapped_column(
        String(2048),
        nullable=True,
    )

    # Capacity
    max_teams: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_teams: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        default=EventStatus.PUBLISHED.value,
        nullable=False,
        index=True,
    )

    # Relationships
    tickets: Mapped[list["Ticket"]] = relationship(
        "Ticket",
        back_populates="event",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    matches: Mapped[list["Match"]] = relationship(
        "Match",
        back_populates="event",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def requires_payment(self) -> bool:
        return bool(self.organizer_checkout_url)

    def __repr__(self) -> str:
        return f"<Event {self.id} {self.title!r} status={self.status}>"
