"""
Credential store — the only place user rows are read or written.

``UserStore`` is the interface the services depend on; ``SqlUserStore``
implements it over a request-scoped ``AsyncSession``.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import case, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User, empty_books
from utils.schemas import Bookshelf, UserRecord

logger = logging.getLogger(__name__)


class DuplicateUserError(Exception):
    """A unique constraint rejected the insert.  ``field`` is "email", "username" or None."""

    def __init__(self, field: Optional[str] = None):
        self.field = field
        super().__init__(f"duplicate {field or 'user'}")


class UserStore(ABC):
    """Persistence operations on the ``User`` aggregate."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def find_matching(self, *, email: str, username: str) -> List[UserRecord]:
        """Every user whose email OR username equals the given values."""

    @abstractmethod
    async def find_by_identifier(self, identifier: str) -> Optional[UserRecord]:
        """User whose email equals ``identifier`` lower-cased, else whose username equals it."""

    @abstractmethod
    async def create(self, *, username: str, email: str, password_hash: str) -> UserRecord:
        """Insert a user with empty shelves.  Raises ``DuplicateUserError``."""

    @abstractmethod
    async def replace_books(self, user_id: str, books: Bookshelf) -> None:
        ...


def _to_record(row: User) -> UserRecord:
    return UserRecord(
        id=str(row.user_id),
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        books=Bookshelf.model_validate(row.books or {}),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _parse_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _duplicate_field(exc: IntegrityError) -> Optional[str]:
    text = str(exc.orig)
    if "uq_users_email" in text:
        return "email"
    if "uq_users_username" in text:
        return "username"
    return None


class SqlUserStore(UserStore):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, user_id: str) -> Optional[UserRecord]:
        uid = _parse_uuid(user_id)
        if uid is None:
            return None
        row = await self._session.get(User, uid)
        return _to_record(row) if row is not None else None

    async def find_matching(self, *, email: str, username: str) -> List[UserRecord]:
        result = await self._session.execute(
            select(User).where(or_(User.email == email, User.username == username))
        )
        return [_to_record(row) for row in result.scalars().all()]

    async def find_by_identifier(self, identifier: str) -> Optional[UserRecord]:
        email = identifier.lower()
        # A username may look like someone else's email; the email owner wins.
        result = await self._session.execute(
            select(User)
            .where(or_(User.username == identifier, User.email == email))
            .order_by(case((User.email == email, 0), else_=1))
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return _to_record(row) if row is not None else None

    async def create(self, *, username: str, email: str, password_hash: str) -> UserRecord:
        row = User(
            user_id=uuid.uuid4(),
            username=username,
            email=email,
            password_hash=password_hash,
            books=empty_books(),
        )
        self._session.add(row)
        try:
            await self._session.flush()
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            field = _duplicate_field(exc)
            logger.info("Insert rejected by unique constraint (%s)", field or "unknown")
            raise DuplicateUserError(field) from exc
        return _to_record(row)

    async def replace_books(self, user_id: str, books: Bookshelf) -> None:
        uid = _parse_uuid(user_id)
        if uid is None:
            raise ValueError(f"Invalid user id: {user_id!r}")
        await self._session.execute(
            update(User)
            .where(User.user_id == uid)
            .values(books=books.to_document(), updated_at=datetime.now(timezone.utc))
        )
        await self._session.commit()
