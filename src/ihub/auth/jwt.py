"""
HS256 JWT verification for tokens issued by the platform auth service.

Access tokens carry the user id in ``sub`` and the user's industry id in
``industry_id`` (null until onboarding picks one).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from ihub.config import get_settings


def create_access_token(user_id: str, email: str, industry_id: str | None = None) -> str:
    """
    Create a short-lived access token.

    The auth service mints production tokens; this mirrors its claims for
    local tooling and tests.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "industry_id": industry_id,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_access_token_expire_minutes),
        "iss": settings.jwt_issuer,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, expected_type: str = "access") -> dict[str, Any]:
    """
    Decode and validate a JWT.

    Raises:
        jwt.InvalidTokenError: On bad signature, expiry, issuer or token type.
    """
    settings = get_settings()
    payload: dict[str, Any] = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        issuer=settings.jwt_issuer,
        options={"require": ["sub", "exp", "iat", "iss"]},
    )
    if payload.get("type") != expected_type:
        msg = f"Expected {expected_type} token, got {payload.get('type')}"
        raise jwt.InvalidTokenError(msg)
    return payload
