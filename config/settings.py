"""
Application settings loaded from environment variables.

Mandatory values (``JWT_SECRET``, ``DATABASE_URL``) have no fallback: a
missing or placeholder value fails at import time so the server never
starts with an insecure configuration.
"""

import pathlib
from typing import List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

_PLACEHOLDER_SECRETS = {
    "your-secret-key",
    "change-me",
    "change-me-jwt-secret-key",
    "secret",
    "changeme",
}


class Settings(BaseSettings):
    # ── Security ─────────────────────────────────────────────────────────
    jwt_secret: str = Field(..., min_length=16)   # HMAC secret for bearer tokens
    jwt_expiry_seconds: int = Field(604800, gt=0)  # 7 days
    bcrypt_rounds: int = Field(10, ge=4, le=16)

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = Field(..., min_length=1)
    db_auto_create: bool = True

    # ── AI provider ──────────────────────────────────────────────────────
    ai_provider: str = "gemini"
    ai_api_key: str = Field(
        "",
        validation_alias=AliasChoices("ai_api_key", "gemini_api_key"),
    )
    ai_model: str = "gemini-2.0-flash"
    ai_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    ai_timeout_seconds: float = 30.0

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 5000
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: List[str] = ["*"]
    rate_limit: str = "100 per 15 minutes"
    rate_limit_enabled: bool = True
    frontend_dir: str = str(pathlib.Path(__file__).resolve().parent.parent / "frontend")

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("jwt_secret")
    @classmethod
    def _reject_placeholder_secret(cls, value: str) -> str:
        if value.strip().lower() in _PLACEHOLDER_SECRETS:
            raise ValueError("JWT_SECRET is set to a well-known placeholder value")
        return value

    @field_validator("ai_provider")
    @classmethod
    def _normalise_provider(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in {"gemini", "openai", "anthropic"}:
            raise ValueError(f"Unsupported AI provider: {value}")
        return value

    def summary(self) -> dict:
        """Non-secret view of the configuration, safe to log."""
        return {
            "database": self.database_url.split("@")[-1],
            "jwt_expiry_seconds": self.jwt_expiry_seconds,
            "bcrypt_rounds": self.bcrypt_rounds,
            "ai_provider": self.ai_provider,
            "ai_model": self.ai_model,
            "ai_configured": bool(self.ai_api_key),
            "cors_origins": self.cors_origins,
            "rate_limit": self.rate_limit if self.rate_limit_enabled else "disabled",
        }


config = Settings()
