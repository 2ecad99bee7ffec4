"""Sentry error tracking.

Only faults are reported. Expected business outcomes (full events,
duplicate registrations, bad webhook secrets...) are dropped in
``before_send``, and health-check and metrics transactions are not traced.
"""

import logging

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.redis import RedisIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from tourney.utils.errors import BUSINESS_ERRORS

UNTRACED_PATHS = ("/health", "/metrics")


def init_sentry(
    dsn: str | None,
    environment: str = "development",
    release: str | None = None,
    traces_sample_rate: float = 0.0,
    profiles_sample_rate: float = 0.0,
) -> bool:
    """Initialize the Sentry SDK when a DSN is configured.

    Returns:
        True if Sentry was initialized
    """
    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            RedisIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=traces_sample_rate,
        profiles_sample_rate=profiles_sample_rate,
        send_default_pii=False,
        before_send=_before_send,
        before_send_transaction=_before_send_transaction,
    )
    return True


def _before_send(event: dict, hint: dict) -> dict | None:
    exc_info = hint.get("exc_info")
    if exc_info and isinstance(exc_info[1], BUSINESS_ERRORS):
        return None
    return event


def _before_send_transaction(event: dict, hint: dict) -> dict | None:
    name = event.get("transaction") or ""
    if name.startswith(UNTRACED_PATHS):
        return None
    return event


def set_identity_context(user_id: str, role: str) -> None:
    """Tag subsequent events with the authenticated caller."""
    sentry_sdk.set_user({"id": user_id})
    sentry_sdk.set_tag("role", role)


def capture_reconciliation_error(
    error: Exception,
    ticket_id: str,
    external_payment_ref: str,
) -> str | None:
    """Report a confirmed payment that could not be applied to its ticket.

    The payer has been charged but the ledger does not show it, so the
    event is raised at ``fatal`` level for manual follow-up.

    Returns:
        Sentry event ID, or None when Sentry is disabled
    """
    with sentry_sdk.new_scope() as scope:
        scope.set_level("fatal")
        scope.set_tag("payment_reconciliation", "failed")
        scope.set_tag("ticket_id", ticket_id)
        scope.set_context("payment", {"external_payment_ref": external_payment_ref})
        return sentry_sdk.capture_exception(error)
