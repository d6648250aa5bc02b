"""Finance service: categories and accounts payable."""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from siscei.core.exceptions import NotFound, ValidationFailure
from siscei.core.security import SecurityContext, resolve_context
from siscei.db.base import Base, utcnow
from siscei.models.finance import AccountsPayable, Category
from siscei.repositories.base import Page, PageRequest, SqlAlchemyRepository
from siscei.repositories.finance import AccountsPayableRepository, CategoryRepository
from siscei.schemas.finance import AccountsPayableUpdate, CategoryUpdate
from siscei.services.paging import parse_filters, resolve_page

logger = logging.getLogger(__name__)


class FinanceService:
    """Bookkeeping of categories and the accounts payable filed under them.

    Reads are open; every write needs an authenticated caller.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._categories = CategoryRepository(session)
        self._payables = AccountsPayableRepository(session)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------
    async def insert_category(self, category: Category, *, context: SecurityContext | None) -> Category:
        resolve_context(context).require_authenticated()
        category.id = None
        category.name = (category.name or "").strip()
        if not category.name:
            raise ValidationFailure("Category name is required")
        await self._ensure_category_name_free(category.name)
        category.created = utcnow()
        category.updated = None
        await self._commit(self._categories, category)
        logger.info("Category %s %r created", category.id, category.name)
        return category

    async def find_category_by_id(self, category_id: int) -> Category:
        category = await self._categories.find_by_id(category_id)
        if category is None:
            raise NotFound("Category", category_id)
        return category

    async def list_categories_by_filters(
        self, filters: str | None = None, page: PageRequest | None = None
    ) -> Page[Category]:
        return await self._categories.find_by_filters(parse_filters(filters), resolve_page(page))

    async def update_category(
        self, category_id: int, data: CategoryUpdate, *, context: SecurityContext | None
    ) -> Category:
        resolve_context(context).require_authenticated()
        category = await self.find_category_by_id(category_id)
        name = data.name.strip() if data.name is not None else None
        if name is not None:
            if not name:
                raise ValidationFailure("Category name is required")
            await self._ensure_category_name_free(name, exclude_id=category.id)
            category.name = name
        if data.description is not None:
            category.description = data.description
        category.updated = utcnow()
        await self._commit()
        return category

    async def remove_category(self, category_id: int, *, context: SecurityContext | None) -> None:
        resolve_context(context).require_authenticated()
        category = await self.find_category_by_id(category_id)
        if await self._payables.exists_for_category(category.id):
            raise ValidationFailure(f"Category {category.name!r} is used by accounts payable")
        await self._categories.delete(category)
        await self._commit()
        logger.info("Category %s removed", category_id)

    async def _ensure_category_name_free(self, name: str, exclude_id: int | None = None) -> None:
        existing = await self._categories.find_by_name(name)
        if existing is not None and existing.id != exclude_id:
            raise ValidationFailure(f"Category {name!r} already exists")

    # ------------------------------------------------------------------
    # Accounts payable
    # ------------------------------------------------------------------
    async def insert_accounts_payable(
        self, entry: AccountsPayable, *, context: SecurityContext | None
    ) -> AccountsPayable:
        resolve_context(context).require_authenticated()
        entry.id = None
        entry.description = (entry.description or "").strip()
        if not entry.description:
            raise ValidationFailure("Description is required")
        self._validate_value(entry.value)
        if entry.due_date is None:
            raise ValidationFailure("Due date is required")
        await self._ensure_category_exists(entry.category_id)
        entry.payment_date = None
        entry.created = utcnow()
        entry.updated = None
        await self._commit(self._payables, entry)
        logger.info("Accounts payable %s created (%s due %s)", entry.id, entry.value, entry.due_date)
        return entry

    async def find_accounts_payable_by_id(self, entry_id: int) -> AccountsPayable:
        entry = await self._payables.find_by_id(entry_id)
        if entry is None:
            raise NotFound("Accounts payable", entry_id)
        return entry

    async def list_accounts_payable_by_filters(
        self,
        filters: str | None = None,
        *,
        category_id: int | None = None,
        paid: bool | None = None,
        page: PageRequest | None = None,
    ) -> Page[AccountsPayable]:
        return await self._payables.find_by_filters(
            parse_filters(filters), resolve_page(page), category_id=category_id, paid=paid
        )

    async def update_accounts_payable(
        self, entry_id: int, data: AccountsPayableUpdate, *, context: SecurityContext | None
    ) -> AccountsPayable:
        resolve_context(context).require_authenticated()
        entry = await self.find_accounts_payable_by_id(entry_id)
        description = data.description.strip() if data.description is not None else None
        if description is not None and not description:
            raise ValidationFailure("Description is required")
        if data.value is not None:
            self._validate_value(data.value)
        if data.category_id is not None:
            await self._ensure_category_exists(data.category_id)

        if description is not None:
            entry.description = description
        if data.value is not None:
            entry.value = data.value
        if data.due_date is not None:
            entry.due_date = data.due_date
        if data.category_id is not None:
            entry.category_id = data.category_id
        entry.updated = utcnow()
        await self._commit()
        return entry

    async def pay_accounts_payable(
        self, entry_id: int, payment_date: date | None = None, *, context: SecurityContext | None
    ) -> AccountsPayable:
        principal = resolve_context(context).require_authenticated()
        entry = await self.find_accounts_payable_by_id(entry_id)
        if entry.paid:
            raise ValidationFailure(f"Accounts payable {entry_id} was already paid on {entry.payment_date}")
        entry.payment_date = payment_date or date.today()
        entry.updated = utcnow()
        await self._commit()
        logger.info("Accounts payable %s paid on %s by %s", entry_id, entry.payment_date, principal.email)
        return entry

    async def remove_accounts_payable(self, entry_id: int, *, context: SecurityContext | None) -> None:
        resolve_context(context).require_authenticated()
        entry = await self.find_accounts_payable_by_id(entry_id)
        await self._payables.delete(entry)
        await self._commit()
        logger.info("Accounts payable %s removed", entry_id)

    @staticmethod
    def _validate_value(value: Decimal | None) -> None:
        if value is None or Decimal(value) <= 0:
            raise ValidationFailure("Value must be greater than zero")

    async def _ensure_category_exists(self, category_id: int | None) -> None:
        if category_id is None or await self._categories.find_by_id(category_id) is None:
            raise ValidationFailure(f"Category {category_id} does not exist")

    async def _commit(self, repository: SqlAlchemyRepository | None = None, new_entity: Base | None = None) -> None:
        try:
            if repository is not None and new_entity is not None:
                await repository.save(new_entity)
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ValidationFailure("Record conflicts with existing data") from exc
