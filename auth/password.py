"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.  The plaintext is first reduced to
a base64 SHA-256 digest so every byte counts despite bcrypt's 72-byte
input limit.
"""

from __future__ import annotations

import base64
import hashlib
from typing import Optional

import bcrypt


def _encode(password: str) -> bytes:
    # 44 ASCII bytes, no NULs: always inside bcrypt's input limit.
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


class PasswordHasher:
    """One-way salted hashing with a fixed work factor."""

    DEFAULT_ROUNDS = 10

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        if not 4 <= rounds <= 31:
            raise ValueError(f"bcrypt rounds must be between 4 and 31, got {rounds}")
        self.rounds = rounds
        self._dummy_hash: Optional[str] = None

    def hash(self, password: str) -> str:
        """Hash a password with bcrypt (auto-salted)."""
        return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison against a bcrypt hash."""
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode())
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, password: str) -> bool:
        """
        Spend one verification against a throwaway digest.

        Used when the account does not exist so the failure takes as long
        as a wrong password would.  Always returns False.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("unused-login-placeholder")
        self.verify(password, self._dummy_hash)
        return False
