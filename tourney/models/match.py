"""Match model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourney.models.base import Base, TimestampMixin, UUIDMixin


class MatchStatus(str, Enum):
    """Match status."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Match(Base, UUIDMixin, TimestampMixin):
    """One pairing in an event's bracket."""

    __tablename__ = "matches"
    __table_args__ = (
        Index("ix_matches_event_round", "event_id", "round", "bracket_position"),
    )

    event_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Position
    round: Mapped[int] = mapped_column(Integer, nullable=False)
    match_number: Mapped[int] = mapped_column(Integer, nullable=False)
    bracket_position: Mapped[int] = mapped_column(Integer, nullable=False)

    # Participants
    player1_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    player2_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    player1_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    player2_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    winner_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_bye: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        default=MatchStatus.PENDING.value,
        nullable=False,
    )
    scheduled_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    event: Mapped["Event"] = relationship("Event", back_populates="matches")

    @property
    def participants(self) -> tuple[str, ...]:
        return tuple(p for p in (self.player1_id, self.player2_id) if p)

    def __repr__(self) -> str:
        return (
            f"<Match {self.match_number} r{self.round}:{self.bracket_position} "
            f"{self.player1_id} vs {self.player2_id}>"
        )
