"""Database session and engine management."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from siscei.core.config import get_settings

from siscei.db.functions import install_sqlite_functions


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine with the SQL functions the repositories rely on."""

    return install_sqlite_functions(create_async_engine(database_url, future=True, echo=False))


_settings = get_settings()
engine = build_engine(_settings.database_url)
async_session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a session factory configured like the application's default one."""

    return async_sessionmaker(bind, expire_on_commit=False, class_=AsyncSession)


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Provide a transactional scope around a series of operations."""

    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
