"""Bearer token and shared-secret checks.

Identities come from an external auth service. This module verifies the
HS256 tokens it issues and can mint equivalent ones for local tooling
and tests.
"""

from __future__ import annotations

import hmac
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from tourney.config import get_settings
from tourney.logging_config import get_logger
from tourney.utils.permissions import Identity, Role

logger = get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"
REQUIRED_CLAIMS = ["sub", "type", "iat", "exp"]


class TokenError(Exception):
    """Rejected bearer token; ``code`` is returned to the client."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def create_access_token(
    user_id: str,
    role: Role | str = Role.PLAYER,
    expires_delta: timedelta | None = None,
) -> str:
    settings = get_settings()
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)

    claims = {
        "sub": user_id,
        "role": Role(role).value,
        "type": ACCESS_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> dict[str, Any]:
    """Decode ``token`` and check its signature, expiry and type.

    Raises:
        TokenError: ``TOKEN_EXPIRED`` or ``AUTH_INVALID_TOKEN``
    """
    if not token:
        raise TokenError("AUTH_INVALID_TOKEN", "Empty token")

    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("TOKEN_EXPIRED", "Token has expired")
    except JWTError as e:
        # Bad signatures are worth a warning; claim problems are client bugs
        log = logger.debug if isinstance(e, jwt.JWTClaimsError) else logger.warning
        log("access_token_rejected", error_type=type(e).__name__)
        raise TokenError("AUTH_INVALID_TOKEN", "Invalid token")

    if claims.get("type") != ACCESS_TOKEN_TYPE:
        raise TokenError("AUTH_INVALID_TOKEN", "Wrong token type")
    return claims


def identity_from_token(token: str) -> Identity:
    """Verified caller identity; a missing role claim means player."""
    claims = verify_access_token(token)

    subject = claims.get("sub")
    if not subject:
        raise TokenError("AUTH_INVALID_TOKEN", "Token has no subject")

    try:
        role = Role(claims.get("role", Role.PLAYER.value))
    except ValueError:
        raise TokenError("AUTH_INVALID_TOKEN", "Unknown role claim")

    return Identity(user_id=str(subject), role=role)


def secrets_match(provided: str | None, expected: str | None) -> bool:
    """Constant-time comparison; an unset expected secret never matches."""
    if not expected or not provided:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())
