# Overview: Service-layer operations for bearer tokens; issues and verifies signed JWTs.

"""
Bearer Token Service

Tokens are HS256 JWTs carrying {sub: user id, iat, exp}. Nothing is stored
server side: the signing key is loaded once from config and every
authenticated request verifies signature and freshness before the caller
is materialised.

SECURITY NOTES:
- Lifetime is clamped to [1h, 24h] whatever the configuration says
- The key is never rotated in-process
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app

from ..errors import UnauthorizedError


ALGORITHM = "HS256"
MIN_LIFETIME = timedelta(hours=1)
MAX_LIFETIME = timedelta(hours=24)


@dataclass
class TokenClaims:
    user_id: int
    issued_at: datetime
    expires_at: datetime


def token_lifetime() -> timedelta:
    hours = current_app.config.get("JWT_LIFETIME_HOURS", 12)
    lifetime = timedelta(hours=hours)
    return max(MIN_LIFETIME, min(MAX_LIFETIME, lifetime))


def _secret() -> str:
    secret = current_app.config.get("JWT_SECRET")
    if not secret:
        raise RuntimeError("JWT_SECRET is not configured")
    return secret


def issue_token(user_id: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + token_lifetime(),
    }
    return jwt.encode(payload, _secret(), algorithm=ALGORITHM)


def decode_token(token: str) -> TokenClaims:
    """
    Verify signature and expiry and return the claims.

    Raises UnauthorizedError for any invalid, expired or malformed token.
    """
    try:
        payload = jwt.decode(
            token,
            _secret(),
            algorithms=[ALGORITHM],
            options={"require": ["sub", "iat", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid token")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid token subject")

    return TokenClaims(
        user_id=user_id,
        issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
