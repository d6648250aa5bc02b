from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from siscei.core.dependencies import SESSION_COOKIE_NAME, get_db, get_mailer
from siscei.core.security import PasswordHasher, Principal, SecurityContext, SessionSigner
from siscei.db.base import Base
from siscei.db.session import build_engine, build_session_factory
from siscei.models import AccountsPayable, Category, User, UserRole
from siscei.services.accounts import AccountService
from siscei.services.finance import FinanceService
from siscei.services.mail import AccountMailer, MailMessage

DATASETS = Path(__file__).resolve().parent / "datasets"


class RecordingMailer(AccountMailer):
    """Keeps delivered messages in memory."""

    def __init__(self) -> None:
        super().__init__()
        self.messages: list[MailMessage] = []

    async def deliver(self, message: MailMessage) -> None:
        self.messages.append(message)


def _user_row(row: dict[str, Any]) -> User:
    return User(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        enabled=row["enabled"],
        role=UserRole(row["role"]),
        password=PasswordHasher.hash(row["password"]),
        created=datetime.fromisoformat(row["created"]),
    )


def _category_row(row: dict[str, Any]) -> Category:
    return Category(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        created=datetime.fromisoformat(row["created"]),
    )


def _accounts_payable_row(row: dict[str, Any]) -> AccountsPayable:
    return AccountsPayable(
        id=row["id"],
        description=row["description"],
        value=Decimal(row["value"]),
        due_date=date.fromisoformat(row["due_date"]),
        payment_date=date.fromisoformat(row["payment_date"]) if row["payment_date"] else None,
        category_id=row["category_id"],
        created=datetime.fromisoformat(row["created"]),
    )


_ROW_BUILDERS: dict[str, Callable[[dict[str, Any]], Any]] = {
    "users": _user_row,
    "categories": _category_row,
    "accounts_payable": _accounts_payable_row,
}


async def load_dataset(session: AsyncSession, name: str) -> None:
    """Insert every row of ``datasets/<name>.json``, table by table."""
    raw = json.loads((DATASETS / f"{name}.json").read_text(encoding="utf-8"))
    for table, rows in raw.items():
        build = _ROW_BUILDERS[table]
        session.add_all(build(row) for row in rows)
        await session.flush()
    await session.commit()


@pytest.fixture
async def engine(tmp_path: Path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'siscei.sqlite3'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    async with build_session_factory(engine)() as session:
        yield session


@pytest.fixture
async def seeded_users(session: AsyncSession) -> None:
    await load_dataset(session, "users")


@pytest.fixture
async def seeded_finance(session: AsyncSession) -> None:
    await load_dataset(session, "finance")


@pytest.fixture
async def mailer():
    mailer = RecordingMailer()
    yield mailer
    await mailer.aclose()


@pytest.fixture
def account_service(session: AsyncSession, mailer: RecordingMailer) -> AccountService:
    return AccountService(session, mailer)


@pytest.fixture
def finance_service(session: AsyncSession) -> FinanceService:
    return FinanceService(session)


@pytest.fixture
def admin_context() -> SecurityContext:
    return SecurityContext(Principal(user_id=9999, email="admin@email.com", role=UserRole.ADMIN))


@pytest.fixture
def user_context() -> SecurityContext:
    return SecurityContext(Principal(user_id=1000, email="rodrigo.user@email.com", role=UserRole.USER))


@pytest.fixture
async def client(engine, mailer: RecordingMailer):
    """HTTP client bound to the app, sharing the test database and mailer."""
    from siscei.main import app

    factory = build_session_factory(engine)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def sign_in(client: httpx.AsyncClient) -> Callable[[int], None]:
    """Attach a valid session cookie for a user id to the client."""

    def _sign_in(user_id: int) -> None:
        client.cookies.set(SESSION_COOKIE_NAME, SessionSigner().dumps({"sub": user_id}))

    return _sign_in
