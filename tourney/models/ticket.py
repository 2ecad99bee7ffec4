"""Ticket model."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourney.models.base import Base, UUIDMixin, utc_now


class TicketStatus(str, Enum):
    """Ticket payment status."""

    PENDING = "pending"  # Registered, awaiting payment
    PAID = "paid"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


_ACTIVE_TICKET = text("status != 'cancelled'")


class Ticket(Base, UUIDMixin):
    """A participant's entry into an event."""

    __tablename__ = "tickets"
    __table_args__ = (
        # One live ticket per participant per event
        Index(
            "uq_tickets_event_participant_active",
            "event_id",
            "participant_id",
            unique=True,
            postgresql_where=_ACTIVE_TICKET,
            sqlite_where=_ACTIVE_TICKET,
        ),
        Index("ix_tickets_event_status", "event_id", "status"),
    )

    event_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    participant_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        default=TicketStatus.PENDING.value,
        nullable=False,
    )

    # Payment
    external_payment_ref: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
    )
    amount: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2),
        nullable=True,
    )

    # Timestamps
    purchased_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
        nullable=False,
    )

    # Relationships
    event: Mapped["Event"] = relationship("Event", back_populates="tickets")

    def __repr__(self) -> str:
        return f"<Ticket {self.id} event={self.event_id} status={self.status}>"
