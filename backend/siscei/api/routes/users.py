"""User account endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from siscei.core.dependencies import get_account_service, get_security_context
from siscei.core.security import SecurityContext
from siscei.models.user import User
from siscei.repositories.base import PageRequest
from siscei.schemas.page import PageRead
from siscei.schemas.user import UserCreate, UserRead, UserUpdate
from siscei.services.accounts import AccountService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def insert_user(
    payload: UserCreate,
    service: AccountService = Depends(get_account_service),
    context: SecurityContext = Depends(get_security_context),
) -> UserRead:
    user = await service.insert_user(User(**payload.model_dump()), context=context)
    return UserRead.model_validate(user)


@router.get("/", response_model=PageRead[UserRead])
async def list_users(
    filters: str | None = None,
    page: int = Query(default=0, ge=0),
    size: int = Query(default=20, ge=1),
    service: AccountService = Depends(get_account_service),
) -> PageRead[UserRead]:
    result = await service.list_users_by_filters(filters, PageRequest(page=page, size=size))
    return PageRead[UserRead].from_page(result, UserRead.model_validate)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: int, service: AccountService = Depends(get_account_service)) -> UserRead:
    return UserRead.model_validate(await service.find_user_by_id(user_id))


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    service: AccountService = Depends(get_account_service),
    context: SecurityContext = Depends(get_security_context),
) -> UserRead:
    updated = await service.update_user(user_id, payload, context=context)
    return UserRead.model_validate(updated)


@router.post("/{user_id}/disable", response_model=UserRead)
async def disable_user(
    user_id: int,
    service: AccountService = Depends(get_account_service),
    context: SecurityContext = Depends(get_security_context),
) -> UserRead:
    return UserRead.model_validate(await service.disable_user(user_id, context=context))


@router.post("/{user_id}/enable", response_model=UserRead)
async def enable_user(
    user_id: int,
    service: AccountService = Depends(get_account_service),
    context: SecurityContext = Depends(get_security_context),
) -> UserRead:
    return UserRead.model_validate(await service.enable_user(user_id, context=context))
