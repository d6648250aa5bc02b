"""Persistence ports for categories and accounts payable."""
from __future__ import annotations

from typing import Sequence

from sqlalchemy import ColumnElement, or_, select

from siscei.db.functions import folded_contains
from siscei.models.finance import AccountsPayable, Category

from .base import Page, PageRequest, SqlAlchemyRepository, any_token


def _category_token_clause(token: str) -> ColumnElement[bool]:
    clauses = [
        folded_contains(Category.name, token),
        folded_contains(Category.description, token),
    ]
    if token.isdecimal():
        clauses.append(Category.id == int(token))
    return or_(*clauses)


def _accounts_payable_token_clause(token: str) -> ColumnElement[bool]:
    clauses = [folded_contains(AccountsPayable.description, token)]
    if token.isdecimal():
        clauses.append(AccountsPayable.id == int(token))
    return or_(*clauses)


class CategoryRepository(SqlAlchemyRepository[Category]):
    model = Category
    default_order = (Category.name, Category.id)

    async def find_by_name(self, name: str) -> Category | None:
        result = await self._session.execute(select(Category).where(Category.name == name))
        return result.scalar_one_or_none()

    async def find_by_filters(self, tokens: Sequence[str], page: PageRequest) -> Page[Category]:
        return await self.find_page(any_token(tokens, _category_token_clause), page=page)


class AccountsPayableRepository(SqlAlchemyRepository[AccountsPayable]):
    model = AccountsPayable
    default_order = (AccountsPayable.due_date, AccountsPayable.id)

    async def exists_for_category(self, category_id: int) -> bool:
        return await self.exists(AccountsPayable.category_id == category_id)

    async def find_by_filters(
        self,
        tokens: Sequence[str],
        page: PageRequest,
        *,
        category_id: int | None = None,
        paid: bool | None = None,
    ) -> Page[AccountsPayable]:
        category_clause = AccountsPayable.category_id == category_id if category_id is not None else None
        if paid is None:
            paid_clause = None
        elif paid:
            paid_clause = AccountsPayable.payment_date.is_not(None)
        else:
            paid_clause = AccountsPayable.payment_date.is_(None)
        return await self.find_page(
            any_token(tokens, _accounts_payable_token_clause),
            category_clause,
            paid_clause,
            page=page,
        )
