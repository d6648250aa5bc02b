"""Security helpers for password hashing, session signing, and caller context."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from passlib.context import CryptContext

from siscei.models.user import User, UserRole

from .config import get_settings
from .exceptions import AccessDenied, AuthenticationRequired


_password_context = CryptContext(schemes=["argon2"], deprecated="auto")


class PasswordHasher:
    """Hash and verify user passwords using Argon2id."""

    @staticmethod
    def hash(password: str) -> str:
        return _password_context.hash(password)

    @staticmethod
    def verify(password: str, hashed: str) -> bool:
        try:
            return _password_context.verify(password, hashed)
        except ValueError:
            # Not a hash passlib recognises.
            return False


class SessionSigner:
    """Sign and unsign short-lived session payloads."""

    def __init__(self, salt: str = "siscei-session") -> None:
        settings = get_settings()
        self._serializer = URLSafeTimedSerializer(settings.secret_key, salt=salt)

    def dumps(self, data: dict[str, Any]) -> str:
        return self._serializer.dumps(data)

    def loads(self, token: str, max_age: int | None = None) -> dict[str, Any]:
        try:
            return self._serializer.loads(token, max_age=max_age)
        except (BadSignature, SignatureExpired) as exc:
            raise ValueError("Invalid or expired session token") from exc


@dataclass(frozen=True, slots=True)
class Principal:
    """Identity of an authenticated caller."""

    user_id: int
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


@dataclass(frozen=True, slots=True)
class SecurityContext:
    """Who is calling. Passed explicitly to every service operation that checks rights.

    An instance without a principal is the anonymous context.
    """

    principal: Principal | None = None

    @classmethod
    def anonymous(cls) -> "SecurityContext":
        return cls()

    @classmethod
    def for_user(cls, user: User) -> "SecurityContext":
        return cls(Principal(user_id=user.id, email=user.email, role=user.role))

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None

    def require_authenticated(self) -> Principal:
        if self.principal is None:
            raise AuthenticationRequired()
        return self.principal

    def require_role(self, role: UserRole) -> Principal:
        principal = self.require_authenticated()
        if principal.role != role:
            raise AccessDenied(f"Role {role.value} required")
        return principal

    def require_self_or_admin(self, user_id: int) -> Principal:
        principal = self.require_authenticated()
        if principal.user_id != user_id and not principal.is_admin:
            raise AccessDenied("Only administrators may change other accounts")
        return principal


def resolve_context(context: SecurityContext | None) -> SecurityContext:
    """Treat a missing context as the anonymous one."""

    return context if context is not None else SecurityContext.anonymous()
