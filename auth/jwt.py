"""
JWT bearer token creation and verification.

Tokens are HS256-signed JWTs carrying ``user_id``, ``iat`` and ``exp``.
The signing secret is loaded from ``config.jwt_secret`` (env var:
``JWT_SECRET``).  Verification is a pure function of the token and the
secret; whether the user still exists is checked by the auth gate.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt


class TokenError(Exception):
    """Base class for token verification failures."""

    kind = "invalid"


class InvalidTokenError(TokenError):
    """Malformed, tampered or wrongly-signed token."""


class TokenExpiredError(TokenError):
    kind = "expired"


class TokenService:
    """Issue and verify signed, time-limited bearer tokens."""

    ALGORITHM = "HS256"
    DEFAULT_LIFETIME_SECONDS = 7 * 24 * 3600

    def __init__(self, secret_key: str, lifetime_seconds: int = DEFAULT_LIFETIME_SECONDS):
        if not secret_key:
            raise ValueError("JWT secret key cannot be empty")
        self._secret_key = secret_key
        self._lifetime = timedelta(seconds=lifetime_seconds)

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def issue(self, user_id: str, now: Optional[datetime] = None) -> str:
        """Create a signed token for ``user_id`` expiring after the configured lifetime."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "user_id": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self._lifetime,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.ALGORITHM)

    def verify(self, token: str) -> str:
        """
        Verify ``token`` and return its ``user_id``.

        Raises ``TokenExpiredError`` past the expiry instant and
        ``InvalidTokenError`` for anything else that does not check out.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.ALGORITHM],
                options={"require": ["exp", "iat", "user_id"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("token expired") from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(str(exc)) from exc

        user_id = payload.get("user_id")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidTokenError("user_id claim is not a string")
        return user_id
