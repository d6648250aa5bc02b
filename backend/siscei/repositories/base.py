"""Generic SQLAlchemy repository with paged predicate queries."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, Sequence, TypeVar

from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from siscei.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)
T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class PageRequest:
    """Zero-based page window."""

    page: int = 0
    size: int = 20

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError("page must not be negative")
        if self.size < 1:
            raise ValueError("size must be at least 1")

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass(slots=True)
class Page(Generic[T]):
    """One window of results plus the size of the whole filtered set."""

    content: list[T]
    total_elements: int
    page: int
    size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size) if self.size else 0

    @property
    def number_of_elements(self) -> int:
        return len(self.content)


def any_token(tokens: Sequence[str], clause_for_token) -> ColumnElement[bool] | None:
    """OR together the clause built for each token; ``None`` when there are no tokens."""

    if not tokens:
        return None
    return or_(*(clause_for_token(token) for token in tokens))


class SqlAlchemyRepository(Generic[ModelT]):
    """CRUD plus paged queries over one mapped class.

    Repositories flush so database-assigned values are populated, but never
    commit; the calling service owns the transaction.
    """

    model: ClassVar[type[Base]]
    default_order: ClassVar[tuple[Any, ...]] = ()

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, identity: int) -> ModelT | None:
        return await self._session.get(self.model, identity)

    async def save(self, entity: ModelT) -> ModelT:
        self._session.add(entity)
        await self._session.flush()
        return entity

    async def delete(self, entity: ModelT) -> None:
        await self._session.delete(entity)
        await self._session.flush()

    async def count(self, *criteria: ColumnElement[bool]) -> int:
        stmt = select(func.count()).select_from(self.model)
        if criteria:
            stmt = stmt.where(*criteria)
        return (await self._session.execute(stmt)).scalar_one()

    async def exists(self, *criteria: ColumnElement[bool]) -> bool:
        stmt = select(self.model.id)
        if criteria:
            stmt = stmt.where(*criteria)
        result = await self._session.execute(stmt.limit(1))
        return result.first() is not None

    async def find_page(
        self,
        *criteria: ColumnElement[bool] | None,
        page: PageRequest,
        order_by: Sequence[Any] | None = None,
    ) -> Page[ModelT]:
        clauses = [clause for clause in criteria if clause is not None]

        total = await self.count(*clauses)

        stmt = select(self.model)
        if clauses:
            stmt = stmt.where(*clauses)
        ordering = order_by if order_by is not None else (self.default_order or (self.model.id,))
        stmt = stmt.order_by(*ordering).offset(page.offset).limit(page.size)
        result = await self._session.execute(stmt)
        return Page(
            content=list(result.scalars().all()),
            total_elements=total,
            page=page.page,
            size=page.size,
        )
