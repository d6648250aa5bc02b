"""Pydantic schemas for categories and accounts payable."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=144)
    description: str | None = Field(default=None, max_length=512)


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=144)
    description: str | None = Field(default=None, max_length=512)


class CategoryRead(CategoryBase):
    id: int
    created: datetime
    updated: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class AccountsPayableBase(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    value: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    due_date: date
    category_id: int


class AccountsPayableCreate(AccountsPayableBase):
    pass


class AccountsPayableUpdate(BaseModel):
    description: str | None = Field(default=None, min_length=1, max_length=255)
    value: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    due_date: date | None = None
    category_id: int | None = None


class AccountsPayablePayment(BaseModel):
    payment_date: date | None = None


class AccountsPayableRead(AccountsPayableBase):
    id: int
    payment_date: date | None = None
    paid: bool
    created: datetime
    updated: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
