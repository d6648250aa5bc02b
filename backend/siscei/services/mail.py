"""Account mail notifications delivered off the request path."""
from __future__ import annotations

import abc
import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

from siscei.core.config import Settings, get_settings
from siscei.core.exceptions import NotificationFailure
from siscei.models.user import User

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MailMessage:
    recipient: str
    subject: str
    body: str


def compose_new_user_account(user: User, app_name: str) -> MailMessage:
    body = (
        f"Hello {user.name},\n\n"
        f"An account has been created for you in {app_name}.\n"
        f"Sign in with your e-mail address: {user.email}\n\n"
        "If you did not expect this message, contact your administrator."
    )
    return MailMessage(recipient=user.email, subject=f"{app_name}: your account is ready", body=body)


class AccountMailer(abc.ABC):
    """Sends account e-mails as background tasks.

    Callers get back a future they are free to ignore; a failed delivery is
    logged here and completes that future with :class:`NotificationFailure`.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._pending: set[asyncio.Task[None]] = set()

    @abc.abstractmethod
    async def deliver(self, message: MailMessage) -> None:
        ...

    def send_new_user_account(self, user: User) -> asyncio.Future[None]:
        message = compose_new_user_account(user, self._settings.app_name)
        return self._dispatch(message)

    def _dispatch(self, message: MailMessage) -> asyncio.Future[None]:
        task = asyncio.get_running_loop().create_task(self._run(message))
        self._pending.add(task)
        task.add_done_callback(self._on_done)
        logger.debug("Scheduled mail %r to %s", message.subject, message.recipient)
        return task

    async def _run(self, message: MailMessage) -> None:
        try:
            await self.deliver(message)
        except Exception as exc:  # noqa: BLE001
            raise NotificationFailure(f"Failed to deliver mail to {message.recipient}: {exc}") from exc

    def _on_done(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.exception("Mail delivery failed: %s", exc, exc_info=exc)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def aclose(self) -> None:
        """Wait for deliveries still in flight."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)


class SmtpAccountMailer(AccountMailer):
    """Deliver through an SMTP relay in a worker thread."""

    async def deliver(self, message: MailMessage) -> None:
        await asyncio.to_thread(self._send, message)
        logger.info("Mail %r delivered to %s", message.subject, message.recipient)

    def _build(self, message: MailMessage) -> EmailMessage:
        email = EmailMessage()
        email["From"] = self._settings.mail_sender
        email["To"] = message.recipient
        email["Subject"] = message.subject
        email.set_content(message.body)
        return email

    def _send(self, message: MailMessage) -> None:
        settings = self._settings
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout_seconds) as server:
            if settings.smtp_use_tls:
                server.starttls()
            if settings.smtp_username:
                server.login(settings.smtp_username, settings.smtp_password or "")
            server.send_message(self._build(message))


class LoggingAccountMailer(AccountMailer):
    """Write mails to the log instead of sending them."""

    async def deliver(self, message: MailMessage) -> None:
        logger.info("Mail disabled; would send %r to %s", message.subject, message.recipient)


def build_mailer(settings: Settings | None = None) -> AccountMailer:
    settings = settings or get_settings()
    if settings.mail_enabled:
        return SmtpAccountMailer(settings)
    return LoggingAccountMailer(settings)
