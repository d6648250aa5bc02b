"""Pydantic schemas for user operations."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from siscei.models.user import UserRole

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"


class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=144)
    email: str = Field(..., max_length=144, pattern=EMAIL_PATTERN)
    role: UserRole = UserRole.USER


class UserCreate(UserBase):
    password: str = Field(..., min_length=8, max_length=128)


class UserRead(UserBase):
    id: int
    enabled: bool
    created: datetime
    updated: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class UserUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=144)
    email: str | None = Field(default=None, max_length=144, pattern=EMAIL_PATTERN)
    role: UserRole | None = None


class UserPasswordUpdate(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=8, max_length=128)
