"""FastAPI application entrypoint."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from siscei.api import api_router
from siscei.api.errors import register_exception_handlers
from siscei.core.config import get_settings
from siscei.db.base import Base
from siscei.db.session import engine
from siscei.models import AccountsPayable, Category, User  # noqa: F401  registers tables
from siscei.services.mail import build_mailer

settings = get_settings()

logging.basicConfig(level=settings.log_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    app.state.mailer = build_mailer(settings)
    logger.info("%s started (mail %s)", settings.app_name, "enabled" if settings.mail_enabled else "disabled")

    try:
        yield
    finally:
        await app.state.mailer.aclose()
        await engine.dispose()
        logger.info("%s stopped", settings.app_name)


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router)
