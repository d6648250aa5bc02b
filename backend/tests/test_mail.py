from __future__ import annotations

import logging
import smtplib

import pytest

from siscei.core.config import Settings
from siscei.core.exceptions import NotificationFailure
from siscei.models import User, UserRole
from siscei.services import mail
from siscei.services.accounts import AccountService
from siscei.services.mail import (
    AccountMailer,
    LoggingAccountMailer,
    MailMessage,
    SmtpAccountMailer,
    build_mailer,
    compose_new_user_account,
)


class FailingMailer(AccountMailer):
    async def deliver(self, message: MailMessage) -> None:
        raise smtplib.SMTPServerDisconnected("relay went away")


class ExplodingMailer(AccountMailer):
    async def deliver(self, message: MailMessage) -> None:  # pragma: no cover - never scheduled
        raise AssertionError

    def send_new_user_account(self, user: User):
        raise RuntimeError("queue is full")


class FakeSMTP:
    instances: list["FakeSMTP"] = []

    def __init__(self, host: str, port: int, timeout: float) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.started_tls = False
        self.credentials: tuple[str, str] | None = None
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self) -> "FakeSMTP":
        return self

    def __exit__(self, *exc_info) -> None:
        return None

    def starttls(self) -> None:
        self.started_tls = True

    def login(self, username: str, password: str) -> None:
        self.credentials = (username, password)

    def send_message(self, message) -> None:
        self.sent.append(message)


def _user() -> User:
    return User(id=7, name="Testing user", email="test@user.com", role=UserRole.USER, password="hash")


def test_compose_new_user_account():
    message = compose_new_user_account(_user(), "SISCEI")

    assert message.recipient == "test@user.com"
    assert "SISCEI" in message.subject
    assert "Testing user" in message.body
    assert "hash" not in message.body


@pytest.mark.asyncio
async def test_smtp_mailer_delivers_through_relay(monkeypatch):
    FakeSMTP.instances.clear()
    monkeypatch.setattr(mail.smtplib, "SMTP", FakeSMTP)
    settings = Settings(
        mail_enabled=True,
        mail_sender="siscei@email.com",
        smtp_host="smtp.email.com",
        smtp_port=2525,
        smtp_username="bot",
        smtp_password="s3cret",
    )
    mailer = SmtpAccountMailer(settings)

    await mailer.send_new_user_account(_user())

    [relay] = FakeSMTP.instances
    assert (relay.host, relay.port) == ("smtp.email.com", 2525)
    assert relay.started_tls is True
    assert relay.credentials == ("bot", "s3cret")
    [sent] = relay.sent
    assert sent["To"] == "test@user.com"
    assert sent["From"] == "siscei@email.com"


@pytest.mark.asyncio
async def test_failed_delivery_completes_future_with_notification_failure():
    mailer = FailingMailer()

    future = mailer.send_new_user_account(_user())

    with pytest.raises(NotificationFailure):
        await future
    await mailer.aclose()
    assert mailer.pending == 0


@pytest.mark.asyncio
async def test_ignored_failure_is_logged(caplog):
    caplog.set_level(logging.ERROR, logger="siscei.services.mail")
    mailer = FailingMailer()

    mailer.send_new_user_account(_user())
    await mailer.aclose()

    [record] = [record for record in caplog.records if record.name == "siscei.services.mail"]
    assert record.getMessage().startswith("Mail delivery failed")
    assert record.exc_info[0] is NotificationFailure


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_insert(session, seeded_users, admin_context):
    mailer = FailingMailer()
    service = AccountService(session, mailer)

    user = await service.insert_user(
        User(name="Testing user", email="test@user.com", password="user"), context=admin_context
    )
    await mailer.aclose()

    assert user.id is not None
    assert (await service.find_user_by_id(user.id)).email == "test@user.com"


@pytest.mark.asyncio
async def test_scheduling_error_does_not_fail_insert(session, seeded_users, admin_context, caplog):
    caplog.set_level(logging.ERROR, logger="siscei.services.accounts")
    service = AccountService(session, ExplodingMailer())

    user = await service.insert_user(
        User(name="Testing user", email="test@user.com", password="user"), context=admin_context
    )

    assert user.id is not None
    assert "Could not schedule new account mail" in caplog.text


def test_build_mailer_follows_settings():
    assert isinstance(build_mailer(Settings(mail_enabled=False)), LoggingAccountMailer)
    assert isinstance(build_mailer(Settings(mail_enabled=True)), SmtpAccountMailer)
