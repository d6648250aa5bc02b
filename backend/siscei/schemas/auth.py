"""Request and response bodies for the session endpoints."""
from __future__ import annotations

from pydantic import BaseModel, Field

from .user import EMAIL_PATTERN


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=144, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "cookie"
    expires_in: int


class AuthStatus(BaseModel):
    app_name: str
    has_users: bool
