"""API dependencies for authentication and common utilities."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from tourney.config import get_settings
from tourney.middleware.sentry import set_identity_context
from tourney.services.notifications import PaymentNotifier
from tourney.services.payment import authenticate_webhook
from tourney.utils.db import get_db
from tourney.utils.permissions import Identity
from tourney.utils.redis_client import get_redis
from tourney.utils.security import TokenError, identity_from_token

# HTTP Bearer security scheme
security = HTTPBearer(auto_error=False)


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "error": {
                "code": code,
                "message": message,
                "details": {},
            }
        },
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_identity_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Identity | None:
    """Get caller identity from token if provided (optional auth)."""
    if not credentials:
        return None

    try:
        return identity_from_token(credentials.credentials)
    except TokenError:
        return None


async def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Identity:
    """Get caller identity from token (required auth).

    Raises:
        HTTPException: If not authenticated or token invalid
    """
    if not credentials:
        raise _unauthorized("AUTH_REQUIRED", "Authentication required")

    try:
        identity = identity_from_token(credentials.credentials)
    except TokenError as e:
        raise _unauthorized(e.code, e.message)

    set_identity_context(identity.user_id, identity.role.value)
    return identity


async def verify_webhook_secret(
    x_webhook_secret: Annotated[str | None, Header()] = None,
) -> str:
    """Authenticate a provider callback before its body is validated."""
    authenticate_webhook(x_webhook_secret, get_settings().payment_webhook_secret)
    return x_webhook_secret


def get_payment_notifier() -> PaymentNotifier:
    """Notifier bound to the shared Redis client (disabled without Redis)."""
    redis_client: Redis | None = get_redis()
    return PaymentNotifier(redis_client)


# Type aliases for cleaner annotations
CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
OptionalIdentity = Annotated[Identity | None, Depends(get_current_identity_optional)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
Notifier = Annotated[PaymentNotifier, Depends(get_payment_notifier)]
