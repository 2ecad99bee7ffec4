"""Payment reconciliation service.

Handles the payment provider's webhook:
1. Authenticate the shared secret
2. Find the ticket by external payment reference
3. Mark it paid when the provider reports a completed payment
4. Notify listeners (best effort)
"""

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from tourney.config import get_settings
from tourney.logging_config import get_logger
from tourney.middleware.prometheus import record_reconciliation
from tourney.middleware.sentry import capture_reconciliation_error
from tourney.models.ticket import TicketStatus
from tourney.schemas.requests import PaymentWebhookRequest
from tourney.services.notifications import PaymentNotifier
from tourney.services.ticket import TicketService
from tourney.utils.errors import (
    BadRequestError,
    NotFoundError,
    ReconciliationError,
    UnauthorizedError,
)
from tourney.utils.security import secrets_match

logger = get_logger(__name__)

COMPLETED = "completed"

_UNSET: Any = object()


def authenticate_webhook(provided_secret: str | None, expected_secret: str | None) -> None:
    """Reject a callback whose X-Webhook-Secret does not match.

    Raises:
        UnauthorizedError: If the secret is missing, wrong or not configured
    """
    if not secrets_match(provided_secret, expected_secret):
        record_reconciliation("rejected")
        logger.warning("payment_webhook_rejected", reason="invalid_secret")
        raise UnauthorizedError("Invalid webhook secret")


@dataclass
class ReconciliationResult:
    success: bool
    message: str
    ticket_id: str
    status: str
    processed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class PaymentReconciliationService:
    """Applies payment provider callbacks to the ticket ledger."""

    def __init__(
        self,
        db: AsyncSession,
        notifier: PaymentNotifier | None = None,
        tickets: TicketService | None = None,
        webhook_secret: str | None = _UNSET,
    ):
        self.db = db
        self.notifier = notifier or PaymentNotifier(None)
        self.tickets = tickets or TicketService(db)
        if webhook_secret is _UNSET:
            webhook_secret = get_settings().payment_webhook_secret
        self.webhook_secret = webhook_secret

    async def reconcile(
        self,
        provided_secret: str | None,
        payload: PaymentWebhookRequest | Mapping[str, Any],
    ) -> ReconciliationResult:
        """Reconcile one provider callback.

        Args:
            provided_secret: Value of the X-Webhook-Secret header
            payload: Callback body with external_payment_ref and status

        Returns:
            ReconciliationResult describing the ticket's state

        Raises:
            UnauthorizedError: If the secret is missing or wrong
            BadRequestError: If the payment reference is missing
            NotFoundError: If no ticket has that reference
            ReconciliationError: If the ticket vanished before it was updated
        """
        authenticate_webhook(provided_secret, self.webhook_secret)

        if not isinstance(payload, PaymentWebhookRequest):
            payload = PaymentWebhookRequest.model_validate(dict(payload))

        ref = (payload.external_payment_ref or "").strip()
        if not ref:
            record_reconciliation("rejected")
            raise BadRequestError(
                "Missing external_payment_ref",
                {"external_payment_ref": "required"},
            )

        ticket = await self.tickets.find_by_payment_reference(ref)
        if ticket is None:
            record_reconciliation("not_found")
            logger.warning("payment_webhook_unknown_ref", external_payment_ref=ref)
            raise NotFoundError("Ticket", ref)

        # Exact match; providers send the lowercase literal
        reported = payload.status or ""
        if reported != COMPLETED:
            record_reconciliation("ignored")
            logger.info(
                "payment_webhook_not_completed",
                ticket_id=ticket.id,
                reported_status=reported,
            )
            return ReconciliationResult(
                success=True,
                message="Payment status received",
                ticket_id=ticket.id,
                status=reported,
            )

        if ticket.status == TicketStatus.PAID.value:
            record_reconciliation("replayed")
            logger.info("payment_webhook_replayed", ticket_id=ticket.id)
            return ReconciliationResult(
                success=True,
                message="Payment already processed",
                ticket_id=ticket.id,
                status=TicketStatus.PAID.value,
                processed_at=ticket.paid_at,
            )

        now = datetime.now(timezone.utc)
        updated = await self.tickets.update_status(ticket.id, TicketStatus.PAID, paid_at=now)
        if updated is None:
            record_reconciliation("failed")
            error = ReconciliationError(
                "Failed to update ticket status",
                {"ticket_id": ticket.id},
            )
            logger.error("payment_reconciliation_failed", ticket_id=ticket.id, external_payment_ref=ref)
            capture_reconciliation_error(error, ticket.id, ref)
            raise error

        record_reconciliation("paid")
        logger.info(
            "payment_reconciled",
            ticket_id=updated.id,
            event_id=updated.event_id,
            participant_id=updated.participant_id,
            amount=str(updated.amount) if updated.amount is not None else None,
        )

        await self.notifier.payment_completed(updated)

        return ReconciliationResult(
            success=True,
            message="Payment processed successfully",
            ticket_id=updated.id,
            status=TicketStatus.PAID.value,
            processed_at=now,
        )
