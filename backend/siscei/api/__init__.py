"""API router aggregator."""
from fastapi import APIRouter

from siscei.api.routes import auth, finance, users

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(finance.router)

__all__ = ["api_router"]
