"""
FastAPI dependencies (shared across routes).

Stateless collaborators (hasher, token service, LLM provider) are built
once per process; the store and the services wrapping it are built per
request around that request's DB session.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import TokenService
from auth.password import PasswordHasher
from auth.service import AccountService
from config.settings import config
from core.book_ai import BookAIService
from core.bookshelf import BookshelfService
from database.session import get_db_session
from database.store import SqlUserStore, UserStore
from utils.llm_providers import BaseLLMProvider, get_llm_provider


def get_user_store(session: AsyncSession = Depends(get_db_session)) -> UserStore:
    return SqlUserStore(session)


@lru_cache(maxsize=1)
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=config.bcrypt_rounds)


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    return TokenService(config.jwt_secret, lifetime_seconds=config.jwt_expiry_seconds)


def get_account_service(
    store: UserStore = Depends(get_user_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> AccountService:
    return AccountService(store, hasher, tokens)


def get_bookshelf_service(store: UserStore = Depends(get_user_store)) -> BookshelfService:
    return BookshelfService(store)


def get_ai_provider() -> Optional[BaseLLMProvider]:
    """The configured provider, or None when no API key is set."""
    if not config.ai_api_key:
        return None
    return get_llm_provider(config.ai_provider, default_model=config.ai_model)


def get_book_ai_service(
    provider: Optional[BaseLLMProvider] = Depends(get_ai_provider),
) -> BookAIService:
    return BookAIService(provider)
