"""
Auth gate — the FastAPI dependency every protected route goes through.

It is the only place a bearer token is turned into a user:
  • no / malformed ``Authorization`` header → 401
  • token fails verification                → 403
  • token names a user that no longer exists → 403
  • otherwise the resolved ``UserRecord`` is handed to the route and
    stored on ``request.state.user``
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header, Request

from api.dependencies import get_token_service, get_user_store
from auth.jwt import TokenError, TokenService
from database.store import UserStore
from utils.errors import ForbiddenError, UnauthenticatedError
from utils.schemas import UserRecord

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from ``Bearer <token>``, or None if absent/malformed."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None, alias="Authorization"),
    tokens: TokenService = Depends(get_token_service),
    store: UserStore = Depends(get_user_store),
) -> UserRecord:
    token = extract_bearer_token(authorization)
    if token is None:
        raise UnauthenticatedError("Access token required")

    try:
        user_id = tokens.verify(token)
    except TokenError as exc:
        logger.info("Rejected %s token on %s: %s", exc.kind, request.url.path, exc)
        raise ForbiddenError("Invalid or expired token") from exc

    user = await store.get(user_id)
    if user is None:
        logger.info("Token for unknown user %s on %s", user_id, request.url.path)
        raise ForbiddenError("User not found")

    request.state.user = user
    return user
