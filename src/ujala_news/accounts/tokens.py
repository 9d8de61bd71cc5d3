"""JWT access tokens."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from ujala_news.core.config import UjalaSettings
from ujala_news.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# Only reachable with DEBUG on; settings validation requires a key otherwise.
DEV_SECRET_KEY = "ujala-dev-secret-change-me"

REQUIRED_CLAIMS = ("sub", "role")


def _secret(settings: UjalaSettings) -> str:
    return settings.SECRET_KEY or DEV_SECRET_KEY


def create_access_token(
    claims: dict[str, Any],
    settings: UjalaSettings,
    *,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Sign `claims` with the configured secret, adding ``iat`` and ``exp``.

    >>> create_access_token({"sub": "7", "role": "admin"}, settings)
    'eyJhbGciOiJIUzI1NiIs...'
    """
    now = datetime.now(timezone.utc)
    expires_delta = expires_delta or timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    payload = {**claims, "iat": now, "exp": now + expires_delta}
    return jwt.encode(payload, _secret(settings), algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: UjalaSettings) -> dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        AuthenticationError: If the token is expired, tampered with or
            missing required claims.
    """
    try:
        claims = jwt.decode(token, _secret(settings), algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError as e:
        raise AuthenticationError("Token expired") from e
    except JWTError as e:
        raise AuthenticationError("Invalid token") from e

    missing = [c for c in REQUIRED_CLAIMS if not claims.get(c)]
    if missing:
        msg = f"Token is missing claims: {', '.join(missing)}"
        raise AuthenticationError(msg)
    return claims
