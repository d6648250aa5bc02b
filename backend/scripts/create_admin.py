import argparse
import asyncio
import getpass
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from siscei.core.exceptions import ValidationFailure
from siscei.db.base import Base
from siscei.db.session import engine, get_session
from siscei.models import User
from siscei.services.accounts import AccountService
from siscei.services.mail import build_mailer


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the initial SISCEI administrator")
    parser.add_argument("name", help="Display name for the administrator")
    parser.add_argument("email", help="Unique email address for login")
    return parser.parse_args()


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if len(password) < 8:
            print("Password must be at least 8 characters long.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


async def create_admin(name: str, email: str, password: str) -> User:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    mailer = build_mailer()
    try:
        async with get_session() as session:
            service = AccountService(session, mailer)
            return await service.register_initial_admin(User(name=name, email=email, password=password))
    finally:
        await mailer.aclose()
        await engine.dispose()


def main() -> int:
    args = parse_args()
    password = prompt_for_password()

    try:
        user = asyncio.run(create_admin(args.name, args.email, password))
    except ValidationFailure as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Created administrator #{user.id}: {user.name} <{user.email}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
