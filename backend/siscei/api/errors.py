"""Translate service errors into HTTP responses."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from siscei.core.exceptions import (
    AccessDenied,
    AuthenticationRequired,
    NotFound,
    SisceiError,
    ValidationFailure,
)

logger = logging.getLogger(__name__)

_STATUS_CODES: list[tuple[type[SisceiError], int]] = [
    (AuthenticationRequired, status.HTTP_401_UNAUTHORIZED),
    (AccessDenied, status.HTTP_403_FORBIDDEN),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (ValidationFailure, status.HTTP_400_BAD_REQUEST),
]


def status_code_for(exc: SisceiError) -> int:
    for error_type, code in _STATUS_CODES:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def _handle_siscei_error(request: Request, exc: SisceiError) -> JSONResponse:
    code = status_code_for(exc)
    if code >= 500:
        logger.error("Unhandled service error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=code, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SisceiError, _handle_siscei_error)
