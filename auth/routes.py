"""
Auth API routes — register, login, verify.

Route prefix: /api
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from api.dependencies import get_account_service
from auth.dependencies import get_current_user
from auth.service import AccountService
from utils.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserRecord,
    VerifyResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    """Register a new user."""
    result = await accounts.register(req.username, req.email, req.password)
    return {"message": "User created successfully", **result.model_dump()}


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    """Login with username or email + password."""
    result = await accounts.login(req.username_or_email, req.password)
    return {"message": "Login successful", **result.model_dump()}


@router.get("/verify", response_model=VerifyResponse)
async def verify(user: UserRecord = Depends(get_current_user)) -> Dict[str, Any]:
    """Echo the identity behind the bearer token."""
    return {"user": user.public().model_dump()}
