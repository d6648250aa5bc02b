"""Persistence port for user accounts."""
from __future__ import annotations

from typing import Sequence

from sqlalchemy import ColumnElement, or_, select

from siscei.db.functions import folded_contains
from siscei.models.user import User

from .base import Page, PageRequest, SqlAlchemyRepository, any_token


def _user_token_clause(token: str) -> ColumnElement[bool]:
    clauses = [
        folded_contains(User.name, token),
        folded_contains(User.email, token),
    ]
    if token.isdecimal():
        clauses.append(User.id == int(token))
    return or_(*clauses)


class UserRepository(SqlAlchemyRepository[User]):
    model = User
    default_order = (User.id,)

    async def find_by_email(self, email: str) -> User | None:
        result = await self._session.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def any_exist(self) -> bool:
        return await self.exists()

    async def find_by_filters(self, tokens: Sequence[str], page: PageRequest) -> Page[User]:
        """Page over users matching any of ``tokens`` (all users when empty)."""
        return await self.find_page(any_token(tokens, _user_token_clause), page=page)
