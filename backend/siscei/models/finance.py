"""Database models for categories and accounts payable."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from siscei.db.base import Base, utcnow


class Category(Base):
    """Grouping used to classify financial entries."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(144), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(512), default=None)
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    accounts_payable: Mapped[list["AccountsPayable"]] = relationship(
        "AccountsPayable", back_populates="category", passive_deletes=True
    )


class AccountsPayable(Base):
    """A bill owed by the company; settled once ``payment_date`` is set."""

    __tablename__ = "accounts_payable"

    id: Mapped[int] = mapped_column(primary_key=True)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    payment_date: Mapped[date | None] = mapped_column(Date, default=None)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    category: Mapped[Category] = relationship("Category", back_populates="accounts_payable")

    @property
    def paid(self) -> bool:
        return self.payment_date is not None
