"""Category and accounts payable endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from siscei.core.dependencies import get_finance_service, get_security_context
from siscei.core.security import SecurityContext
from siscei.models.finance import AccountsPayable, Category
from siscei.repositories.base import PageRequest
from siscei.schemas.finance import (
    AccountsPayableCreate,
    AccountsPayablePayment,
    AccountsPayableRead,
    AccountsPayableUpdate,
    CategoryCreate,
    CategoryRead,
    CategoryUpdate,
)
from siscei.schemas.page import PageRead
from siscei.services.finance import FinanceService

router = APIRouter(prefix="/finance", tags=["finance"])


@router.post("/categories", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    service: FinanceService = Depends(get_finance_service),
    context: SecurityContext = Depends(get_security_context),
) -> CategoryRead:
    category = await service.insert_category(Category(**payload.model_dump()), context=context)
    return CategoryRead.model_validate(category)


@router.get("/categories", response_model=PageRead[CategoryRead])
async def list_categories(
    filters: str | None = None,
    page: int = Query(default=0, ge=0),
    size: int = Query(default=20, ge=1),
    service: FinanceService = Depends(get_finance_service),
) -> PageRead[CategoryRead]:
    result = await service.list_categories_by_filters(filters, PageRequest(page=page, size=size))
    return PageRead[CategoryRead].from_page(result, CategoryRead.model_validate)


@router.get("/categories/{category_id}", response_model=CategoryRead)
async def get_category(category_id: int, service: FinanceService = Depends(get_finance_service)) -> CategoryRead:
    return CategoryRead.model_validate(await service.find_category_by_id(category_id))


@router.put("/categories/{category_id}", response_model=CategoryRead)
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    service: FinanceService = Depends(get_finance_service),
    context: SecurityContext = Depends(get_security_context),
) -> CategoryRead:
    updated = await service.update_category(category_id, payload, context=context)
    return CategoryRead.model_validate(updated)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_category(
    category_id: int,
    service: FinanceService = Depends(get_finance_service),
    context: SecurityContext = Depends(get_security_context),
) -> Response:
    await service.remove_category(category_id, context=context)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/accounts-payable", response_model=AccountsPayableRead, status_code=status.HTTP_201_CREATED)
async def create_accounts_payable(
    payload: AccountsPayableCreate,
    service: FinanceService = Depends(get_finance_service),
    context: SecurityContext = Depends(get_security_context),
) -> AccountsPayableRead:
    entry = await service.insert_accounts_payable(AccountsPayable(**payload.model_dump()), context=context)
    return AccountsPayableRead.model_validate(entry)


@router.get("/accounts-payable", response_model=PageRead[AccountsPayableRead])
async def list_accounts_payable(
    filters: str | None = None,
    category_id: int | None = None,
    paid: bool | None = None,
    page: int = Query(default=0, ge=0),
    size: int = Query(default=20, ge=1),
    service: FinanceService = Depends(get_finance_service),
) -> PageRead[AccountsPayableRead]:
    result = await service.list_accounts_payable_by_filters(
        filters, category_id=category_id, paid=paid, page=PageRequest(page=page, size=size)
    )
    return PageRead[AccountsPayableRead].from_page(result, AccountsPayableRead.model_validate)


@router.get("/accounts-payable/{entry_id}", response_model=AccountsPayableRead)
async def get_accounts_payable(
    entry_id: int, service: FinanceService = Depends(get_finance_service)
) -> AccountsPayableRead:
    return AccountsPayableRead.model_validate(await service.find_accounts_payable_by_id(entry_id))


@router.put("/accounts-payable/{entry_id}", response_model=AccountsPayableRead)
async def update_accounts_payable(
    entry_id: int,
    payload: AccountsPayableUpdate,
    service: FinanceService = Depends(get_finance_service),
    context: SecurityContext = Depends(get_security_context),
) -> AccountsPayableRead:
    updated = await service.update_accounts_payable(entry_id, payload, context=context)
    return AccountsPayableRead.model_validate(updated)


@router.post("/accounts-payable/{entry_id}/pay", response_model=AccountsPayableRead)
async def pay_accounts_payable(
    entry_id: int,
    payload: AccountsPayablePayment | None = None,
    service: FinanceService = Depends(get_finance_service),
    context: SecurityContext = Depends(get_security_context),
) -> AccountsPayableRead:
    payment_date = payload.payment_date if payload else None
    paid = await service.pay_accounts_payable(entry_id, payment_date, context=context)
    return AccountsPayableRead.model_validate(paid)


@router.delete("/accounts-payable/{entry_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_accounts_payable(
    entry_id: int,
    service: FinanceService = Depends(get_finance_service),
    context: SecurityContext = Depends(get_security_context),
) -> Response:
    await service.remove_accounts_payable(entry_id, context=context)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
