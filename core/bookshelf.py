"""
Book collection service — read and wholesale-replace a user's shelves.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from database.models import SHELVES
from database.store import UserStore
from utils.errors import ValidationError
from utils.schemas import Bookshelf, UserRecord

logger = logging.getLogger(__name__)


def parse_bookshelf(payload: Any) -> Bookshelf:
    """
    Validate a client-supplied ``books`` object.

    It must be an object carrying at least one of the three shelves;
    missing shelves become empty, unknown keys are dropped, and every
    entry is normalised (progress, color, dateAdded).
    """
    if not isinstance(payload, dict) or not any(shelf in payload for shelf in SHELVES):
        raise ValidationError("Invalid books data")
    try:
        return Bookshelf.model_validate(payload)
    except PydanticValidationError as exc:
        logger.debug("Rejected books payload: %s", exc)
        raise ValidationError("Invalid books data") from exc


class BookshelfService:
    def __init__(self, store: UserStore):
        self._store = store

    def get(self, user: UserRecord) -> Bookshelf:
        return user.books

    async def replace(self, user: UserRecord, payload: Any) -> Bookshelf:
        """Replace all three shelves with ``payload`` (no merge)."""
        books = parse_bookshelf(payload)
        await self._store.replace_books(user.id, books)
        logger.info(
            "Updated books for %s (read=%d unread=%d wishlist=%d)",
            user.id, len(books.read), len(books.unread), len(books.wishlist),
        )
        return books
