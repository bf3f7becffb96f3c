"""
Application error taxonomy.

Every error the API deliberately reports derives from ``AppError`` and
carries the HTTP status and the human-readable message sent to the client
as ``{"error": message}``.  Handlers live in ``api.exception_handlers``.
"""

from __future__ import annotations

from typing import Optional


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Invalid request"


class ConflictError(AppError):
    """Username or email already taken."""

    status_code = 400
    default_message = "User already exists"


class InvalidCredentialsError(AppError):
    """Login failed — deliberately silent about which part was wrong."""

    status_code = 400
    default_message = "Invalid credentials"


class UnauthenticatedError(AppError):
    status_code = 401
    default_message = "Access token required"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Invalid or expired token"


class NotFoundError(AppError):
    status_code = 404
    default_message = "API endpoint not found"


class UpstreamError(AppError):
    """
    The AI provider was unreachable, misconfigured or returned something
    unusable.  ``detail`` is logged server-side only.
    """

    status_code = 500
    default_message = "AI service unavailable"

    def __init__(self, message: Optional[str] = None, *, detail: str = "") -> None:
        super().__init__(message)
        self.detail = detail


class InternalError(AppError):
    """Unexpected fault; the only message a client ever sees for it is generic."""

    status_code = 500
