"""
Pydantic schemas for the bookshelf API.
"""

from __future__ import annotations

import math
import random
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


# ═══════════════════════════════════════════════════════════════════════════════
# Books
# ═══════════════════════════════════════════════════════════════════════════════

BOOK_COLORS = (
    "linear-gradient(to right, #2E7D32, #388E3C, #4CAF50)",
    "linear-gradient(to right, #C62828, #D32F2F, #F44336)",
    "linear-gradient(to right, #1565C0, #1976D2, #2196F3)",
    "linear-gradient(to right, #6A1B9A, #8E24AA, #AB47BC)",
    "linear-gradient(to right, #E65100, #FF6F00, #FF8F00)",
    "linear-gradient(to right, #BF360C, #D84315, #FF3D00)",
    "linear-gradient(to right, #1A237E, #303F9F, #3F51B5)",
)


def pick_book_color() -> str:
    return random.choice(BOOK_COLORS)


def reading_progress(current_page: int, pages: int) -> int:
    """Whole-number percentage read, rounded half up and capped at 100."""
    if pages <= 0:
        return 0
    return min(math.floor(current_page / pages * 100 + 0.5), 100)


class BookEntry(BaseModel):
    """
    One book on a shelf.

    ``progress`` is always derived from the page counts; a missing
    ``color`` or ``dateAdded`` is filled in on first validation.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    title: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    genre: str = ""
    pages: int = Field(0, ge=0)
    current_page: int = Field(0, ge=0)
    notes: str = ""
    progress: int = 0
    color: str = ""
    date_added: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("title", "author", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("genre", "notes", "color", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("pages", "current_page", "progress", mode="before")
    @classmethod
    def _none_to_zero(cls, value):
        return 0 if value is None else value

    @model_validator(mode="after")
    def _derive(self) -> "BookEntry":
        self.progress = reading_progress(self.current_page, self.pages)
        if not self.color:
            self.color = pick_book_color()
        return self


class Bookshelf(BaseModel):
    model_config = ConfigDict(extra="ignore")

    read: List[BookEntry] = Field(default_factory=list)
    unread: List[BookEntry] = Field(default_factory=list)
    wishlist: List[BookEntry] = Field(default_factory=list)

    def to_document(self) -> dict:
        """JSON-ready dict in wire format (camelCase keys, ISO dates)."""
        return self.model_dump(mode="json", by_alias=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════════════════════════


class PublicUser(BaseModel):
    """Fields of a user that may leave the server."""

    id: str
    username: str
    email: str


class UserRecord(BaseModel):
    """A user as read from the credential store."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str
    email: str
    password_hash: str = Field(repr=False)
    books: Bookshelf = Field(default_factory=Bookshelf)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def public(self) -> PublicUser:
        return PublicUser(id=self.id, username=self.username, email=self.email)


# ═══════════════════════════════════════════════════════════════════════════════
# Auth — Request / Response
# ═══════════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    # Presence and length rules are enforced by AccountService so that each
    # failure gets its own message.
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username_or_email: Optional[str] = Field(None, alias="usernameOrEmail")
    password: Optional[str] = None


class AuthResult(BaseModel):
    token: str
    user: PublicUser


class AuthResponse(AuthResult):
    message: str


class VerifyResponse(BaseModel):
    user: PublicUser


class MessageResponse(BaseModel):
    message: str


# ═══════════════════════════════════════════════════════════════════════════════
# AI
# ═══════════════════════════════════════════════════════════════════════════════


class SummaryRequest(BaseModel):
    title: Optional[str] = None
    author: Optional[str] = None


class SummaryResponse(BaseModel):
    summary: str


class RecommendationRequest(BaseModel):
    genre: Optional[str] = None


class BookRecommendation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    genre: str = ""
    overview: str = ""


class RecommendationsResponse(BaseModel):
    recommendations: List[BookRecommendation]


# ═══════════════════════════════════════════════════════════════════════════════
# Misc
# ═══════════════════════════════════════════════════════════════════════════════


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime: float
