"""
Account service — registration and login.

Orchestrates the credential store, the password hasher and the token
service.  The store is injected per request; nothing here holds state
between calls.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional

from auth.jwt import TokenService
from auth.password import PasswordHasher
from database.store import DuplicateUserError, UserStore
from utils.errors import ConflictError, InvalidCredentialsError, ValidationError
from utils.schemas import AuthResult

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6

_DUPLICATE_MESSAGES = {
    "email": "Email already exists",
    "username": "Username already exists",
}


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


class AccountService:
    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        tokens: TokenService,
    ):
        self._store = store
        self._hasher = hasher
        self._tokens = tokens

    async def register(
        self,
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> AuthResult:
        """
        Validate, create the user, and issue its first token.

        Validation stops at the first failing rule; every rule has its own
        message.  Duplicate email wins over duplicate username.
        """
        username = (username or "").strip()
        email = (email or "").strip().lower()
        password = password or ""

        if not username or not email or not password:
            raise ValidationError("All fields are required")
        if len(username) < MIN_USERNAME_LENGTH:
            raise ValidationError(
                f"Username must be at least {MIN_USERNAME_LENGTH} characters"
            )
        if not is_valid_email(email):
            raise ValidationError("Invalid email address")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        existing = await self._store.find_matching(email=email, username=username)
        if any(u.email == email for u in existing):
            raise ConflictError(_DUPLICATE_MESSAGES["email"])
        if any(u.username == username for u in existing):
            raise ConflictError(_DUPLICATE_MESSAGES["username"])

        password_hash = await asyncio.to_thread(self._hasher.hash, password)
        try:
            user = await self._store.create(
                username=username, email=email, password_hash=password_hash,
            )
        except DuplicateUserError as exc:
            # Lost a race with a concurrent registration.
            raise ConflictError(_DUPLICATE_MESSAGES.get(exc.field)) from exc

        token = self._tokens.issue(user.id)
        logger.info("Registered user %s (%s)", user.username, user.id)
        return AuthResult(token=token, user=user.public())

    async def login(self, username_or_email: Optional[str], password: Optional[str]) -> AuthResult:
        """Exchange valid credentials for a token."""
        identifier = (username_or_email or "").strip()
        if not identifier or not password:
            raise ValidationError("Username/email and password are required")

        user = await self._store.find_by_identifier(identifier)
        if user is None:
            await asyncio.to_thread(self._hasher.verify_dummy, password)
            logger.info("Login failed: unknown identifier")
            raise InvalidCredentialsError()

        if not await asyncio.to_thread(self._hasher.verify, password, user.password_hash):
            logger.info("Login failed: bad password for %s", user.id)
            raise InvalidCredentialsError()

        token = self._tokens.issue(user.id)
        logger.info("Login: %s (%s)", user.username, user.id)
        return AuthResult(token=token, user=user.public())
