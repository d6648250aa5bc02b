"""Authentication endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from siscei.core.config import get_settings
from siscei.core.dependencies import (
    SESSION_COOKIE_NAME,
    get_account_service,
    get_current_user,
    get_security_context,
)
from siscei.core.security import SecurityContext, SessionSigner
from siscei.models.user import User
from siscei.schemas.auth import AuthStatus, LoginRequest, TokenResponse
from siscei.schemas.user import UserCreate, UserPasswordUpdate, UserRead
from siscei.services.accounts import AccountService

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, user: User) -> TokenResponse:
    token = SessionSigner().dumps({"sub": user.id})
    settings = get_settings()
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=settings.access_token_expire_minutes * 60,
    )
    return TokenResponse(access_token=token, expires_in=settings.access_token_expire_minutes * 60)


@router.get("/status", response_model=AuthStatus)
async def auth_status(service: AccountService = Depends(get_account_service)) -> AuthStatus:
    return AuthStatus(app_name=get_settings().app_name, has_users=await service.has_users())


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_initial_admin(
    payload: UserCreate,
    service: AccountService = Depends(get_account_service),
) -> UserRead:
    user = await service.register_initial_admin(User(**payload.model_dump(exclude={"role"})))
    return UserRead.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    service: AccountService = Depends(get_account_service),
) -> TokenResponse:
    user = await service.authenticate(payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return _set_session_cookie(response, user)


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME)


@router.get("/me", response_model=UserRead)
async def get_current_user_info(current_user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(current_user)


@router.put("/password", response_model=UserRead)
async def change_password(
    payload: UserPasswordUpdate,
    service: AccountService = Depends(get_account_service),
    context: SecurityContext = Depends(get_security_context),
) -> UserRead:
    principal = context.require_authenticated()
    updated = await service.change_password(
        principal.user_id, payload.current_password, payload.new_password, context=context
    )
    return UserRead.model_validate(updated)
