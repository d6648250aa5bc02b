"""Account service: user creation, lookup, listing and maintenance."""
from __future__ import annotations

import logging
import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from siscei.core.exceptions import AccessDenied, NotFound, ValidationFailure
from siscei.core.security import PasswordHasher, SecurityContext, resolve_context
from siscei.db.base import utcnow
from siscei.models.user import User, UserRole
from siscei.repositories.base import Page, PageRequest
from siscei.repositories.users import UserRepository
from siscei.schemas.user import UserUpdate
from siscei.services.mail import AccountMailer
from siscei.services.paging import parse_filters, resolve_page

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+$")


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class AccountService:
    """Gateway between callers and user storage.

    Operations that change data take the caller's :class:`SecurityContext`
    explicitly and commit their own transaction.
    """

    def __init__(self, session: AsyncSession, mailer: AccountMailer) -> None:
        self._session = session
        self._users = UserRepository(session)
        self._mailer = mailer

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    async def insert_user(self, user: User, *, context: SecurityContext | None) -> User:
        """Persist a new, enabled account and announce it by e-mail.

        Raises :class:`AuthenticationRequired` before looking at ``user`` when
        the caller is anonymous, and :class:`AccessDenied` when a non-admin asks
        for any role other than ``USER``.
        """
        principal = resolve_context(context).require_authenticated()
        role = user.role or UserRole.USER
        if role != UserRole.USER and not principal.is_admin:
            raise AccessDenied(f"Only administrators may create {role.value} accounts")
        created = await self._create(user, role=role)
        logger.info("User %s <%s> created", created.id, created.email)
        self._notify_new_account(created)
        return created

    async def register_initial_admin(self, user: User) -> User:
        """Create the first administrator; only possible while no user exists."""
        if await self._users.any_exist():
            raise ValidationFailure("Initial administrator already exists")
        created = await self._create(user, role=UserRole.ADMIN, sole_account=True)
        logger.info("Initial administrator %s <%s> registered", created.id, created.email)
        self._notify_new_account(created)
        return created

    async def _create(self, user: User, *, role: UserRole, sole_account: bool = False) -> User:
        plaintext = user.password
        user.id = None
        user.name = (user.name or "").strip()
        user.email = _normalize_email(user.email)
        self._validate_candidate(user, plaintext)
        if await self._users.find_by_email(user.email):
            raise ValidationFailure(f"E-mail {user.email} is already in use")

        user.role = role
        user.enabled = True
        user.created = utcnow()
        user.updated = None
        user.password = PasswordHasher.hash(plaintext)
        await self._commit(user, sole_account=sole_account)
        return user

    @staticmethod
    def _validate_candidate(user: User, plaintext: str | None) -> None:
        if not user.name:
            raise ValidationFailure("Name is required")
        if not _EMAIL_RE.match(user.email):
            raise ValidationFailure("A valid e-mail is required")
        if not plaintext or not plaintext.strip():
            raise ValidationFailure("Password is required")

    def _notify_new_account(self, user: User) -> None:
        try:
            self._mailer.send_new_user_account(user)
        except Exception:  # noqa: BLE001
            logger.exception("Could not schedule new account mail for user %s", user.id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    async def find_user_by_id(self, user_id: int) -> User:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise NotFound("User", user_id)
        return user

    async def list_users_by_filters(
        self, filters: str | None = None, page: PageRequest | None = None
    ) -> Page[User]:
        """Page over users matching any comma-separated token in ``filters``.

        A token matches a case-insensitive substring of the name or e-mail; an
        all-digit token also matches the id. No tokens lists every user.
        """
        return await self._users.find_by_filters(parse_filters(filters), resolve_page(page))

    async def has_users(self) -> bool:
        return await self._users.any_exist()

    async def authenticate(self, email: str, password: str) -> User | None:
        user = await self._users.find_by_email(email)
        if user is None or not user.enabled:
            logger.debug("Login refused for %s", email)
            return None
        if not PasswordHasher.verify(password, user.password):
            logger.debug("Wrong password for %s", email)
            return None
        return user

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------
    async def update_user(self, user_id: int, data: UserUpdate, *, context: SecurityContext | None) -> User:
        principal = resolve_context(context).require_self_or_admin(user_id)
        if data.role is not None and not principal.is_admin:
            raise AccessDenied("Only administrators may change roles")

        user = await self.find_user_by_id(user_id)
        name = data.name.strip() if data.name is not None else None
        if name is not None and not name:
            raise ValidationFailure("Name is required")
        email = _normalize_email(data.email) if data.email is not None else None
        if email is not None:
            if not _EMAIL_RE.match(email):
                raise ValidationFailure("A valid e-mail is required")
            existing = await self._users.find_by_email(email)
            if existing is not None and existing.id != user.id:
                raise ValidationFailure(f"E-mail {email} is already in use")

        if name is not None:
            user.name = name
        if email is not None:
            user.email = email
        if data.role is not None:
            user.role = data.role
        user.updated = utcnow()
        await self._commit()
        return user

    async def change_password(
        self,
        user_id: int,
        current_password: str,
        new_password: str,
        *,
        context: SecurityContext | None,
    ) -> User:
        principal = resolve_context(context).require_authenticated()
        if principal.user_id != user_id:
            raise AccessDenied("Passwords can only be changed by their owner")
        user = await self.find_user_by_id(user_id)
        if not new_password or not new_password.strip():
            raise ValidationFailure("Password is required")
        if not PasswordHasher.verify(current_password, user.password):
            raise ValidationFailure("Current password is incorrect")
        user.password = PasswordHasher.hash(new_password)
        user.updated = utcnow()
        await self._commit()
        return user

    async def disable_user(self, user_id: int, *, context: SecurityContext | None) -> User:
        principal = resolve_context(context).require_role(UserRole.ADMIN)
        if principal.user_id == user_id:
            raise ValidationFailure("Administrators cannot disable their own account")
        user = await self._set_enabled(user_id, False)
        logger.info("User %s disabled by %s", user_id, principal.email)
        return user

    async def enable_user(self, user_id: int, *, context: SecurityContext | None) -> User:
        principal = resolve_context(context).require_role(UserRole.ADMIN)
        user = await self._set_enabled(user_id, True)
        logger.info("User %s enabled by %s", user_id, principal.email)
        return user

    async def _set_enabled(self, user_id: int, enabled: bool) -> User:
        user = await self.find_user_by_id(user_id)
        user.enabled = enabled
        user.updated = utcnow()
        await self._commit()
        return user

    async def _commit(self, new_user: User | None = None, *, sole_account: bool = False) -> None:
        try:
            if new_user is not None:
                await self._users.save(new_user)
            if sole_account and await self._users.count() > 1:
                # Another registration won the race.
                await self._session.rollback()
                raise ValidationFailure("Initial administrator already exists")
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ValidationFailure("Record conflicts with existing data") from exc
