"""Reusable dependencies for FastAPI routes."""
from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from siscei.core.config import get_settings
from siscei.core.security import SecurityContext, SessionSigner
from siscei.db.session import get_session
from siscei.models.user import User
from siscei.services.accounts import AccountService
from siscei.services.finance import FinanceService
from siscei.services.mail import AccountMailer

SESSION_COOKIE_NAME = "siscei_session"


async def get_db() -> AsyncIterator[AsyncSession]:
    async with get_session() as session:
        yield session


def get_mailer(request: Request) -> AccountMailer:
    return request.app.state.mailer


async def get_account_service(
    session: AsyncSession = Depends(get_db),
    mailer: AccountMailer = Depends(get_mailer),
) -> AccountService:
    return AccountService(session, mailer)


async def get_finance_service(session: AsyncSession = Depends(get_db)) -> FinanceService:
    return FinanceService(session)


async def _session_user(request: Request, session: AsyncSession) -> User | None:
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        return None

    settings = get_settings()
    try:
        payload = SessionSigner().loads(token, max_age=settings.access_token_expire_minutes * 60)
    except ValueError:
        return None

    user_id = payload.get("sub")
    if not isinstance(user_id, int):
        return None
    user = await session.get(User, user_id)
    if user is None or not user.enabled:
        return None
    return user


async def get_security_context(
    request: Request,
    session: AsyncSession = Depends(get_db),
) -> SecurityContext:
    """Context of the caller; anonymous when the session cookie is missing or stale."""

    user = await _session_user(request, session)
    if user is None:
        return SecurityContext.anonymous()
    return SecurityContext.for_user(user)


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_db),
) -> User:
    user = await _session_user(request, session)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user
