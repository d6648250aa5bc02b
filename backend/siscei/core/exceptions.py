"""Error taxonomy shared by services, repositories and the HTTP layer."""
from __future__ import annotations


class SisceiError(Exception):
    """Base class for every error raised on purpose by SISCEI."""


class AuthenticationRequired(SisceiError):
    """Raised when an operation needs an authenticated caller and there is none."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class AccessDenied(SisceiError):
    """Raised when the caller is authenticated but lacks the required rights."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


class NotFound(SisceiError, LookupError):
    """Raised when a requested identity does not exist."""

    def __init__(self, entity: str, identity: object) -> None:
        super().__init__(f"{entity} {identity} not found")
        self.entity = entity
        self.identity = identity


class ValidationFailure(SisceiError, ValueError):
    """Raised when a candidate is malformed or conflicts with stored data."""


class NotificationFailure(SisceiError, RuntimeError):
    """Raised when a notification attempt fails."""
