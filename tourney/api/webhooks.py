"""Payment provider webhook.

Endpoints:
- POST /webhooks/payment - Provider callback, authenticated by shared secret
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from tourney.api.deps import DbSession, Notifier, verify_webhook_secret
from tourney.schemas import ERROR_RESPONSES, PaymentWebhookRequest, PaymentWebhookResponse
from tourney.services.payment import PaymentReconciliationService

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post(
    "/payment",
    response_model=PaymentWebhookResponse,
    responses={code: ERROR_RESPONSES[code] for code in (400, 401, 404)},
)
async def payment_webhook(
    webhook_secret: Annotated[str, Depends(verify_webhook_secret)],
    request: PaymentWebhookRequest,
    db: DbSession,
    notifier: Notifier,
):
    """Reconcile a payment callback against the ticket ledger.

    The secret is checked before the body is parsed, so unauthenticated
    callers get 401 whatever they send. ``completed`` marks the ticket
    paid; any other status is acknowledged without changes. Replays of a
    completed payment are harmless.
    """
    service = PaymentReconciliationService(db, notifier=notifier)
    result = await service.reconcile(webhook_secret, request)
    return PaymentWebhookResponse(**result.to_dict())
