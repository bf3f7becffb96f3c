"""
REST API routes — books and health.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from api.dependencies import get_bookshelf_service
from auth.dependencies import get_current_user
from core.bookshelf import BookshelfService
from utils.schemas import HealthResponse, MessageResponse, UserRecord

logger = logging.getLogger(__name__)

router = APIRouter()

_STARTED_AT = time.monotonic()


@router.get("/books")
async def get_books(
    user: UserRecord = Depends(get_current_user),
    shelves: BookshelfService = Depends(get_bookshelf_service),
) -> Dict[str, Any]:
    """All three shelves of the authenticated user."""
    return shelves.get(user).to_document()


@router.put("/books", response_model=MessageResponse)
async def put_books(
    body: Dict[str, Any] = Body(...),
    user: UserRecord = Depends(get_current_user),
    shelves: BookshelfService = Depends(get_bookshelf_service),
) -> Dict[str, Any]:
    """Replace the whole collection with ``body["books"]``."""
    await shelves.replace(user, body.get("books"))
    return {"message": "Books updated successfully"}


@router.get("/health", response_model=HealthResponse)
async def health() -> Dict[str, Any]:
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
    }
