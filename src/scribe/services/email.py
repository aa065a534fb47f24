"""Transactional email: delivery backends and account notification messages."""

import asyncio
import html as html_lib
import logging
from abc import ABC, abstractmethod
from collections.abc import Coroutine
from email.message import EmailMessage
from typing import Any

import aiosmtplib
import httpx

from scribe.config import settings

logger = logging.getLogger(__name__)


class EmailBackend(ABC):
    """Delivers a single message. Implementations never raise on delivery failure."""

    @abstractmethod
    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        """Deliver one email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body
            text: Plain text alternative, if any

        Returns:
            False when delivery failed; the failure has already been logged
        """
        pass


class ConsoleEmailBackend(EmailBackend):
    """Prints messages to the log so verification links can be copied in development."""

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        rule = "-" * 72
        logger.info(f"Outgoing email (not sent)\n{rule}\nTo: {to}\nSubject: {subject}\n\n{text or html}\n{rule}")
        return True


class SMTPEmailBackend(EmailBackend):
    """Sends through an SMTP relay with STARTTLS, or implicit TLS on port 465."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        use_tls: bool = True,
        from_address: str = "",
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address
        self.timeout = timeout

    def build_message(self, to: str, subject: str, html: str, text: str | None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.from_address
        message["To"] = to
        message["Subject"] = subject
        # multipart/alternative: plain text first, HTML last (preferred)
        if text:
            message.set_content(text)
            message.add_alternative(html, subtype="html")
        else:
            message.set_content(html, subtype="html")
        return message

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        implicit_tls = self.use_tls and self.port == 465
        try:
            await aiosmtplib.send(
                self.build_message(to, subject, html, text),
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                use_tls=implicit_tls,
                start_tls=self.use_tls and not implicit_tls,
                timeout=self.timeout,
            )
        except Exception as e:
            logger.error(f"SMTP delivery of {subject!r} to {to} failed: {e}")
            return False

        logger.info(f"Sent {subject!r} to {to} via SMTP")
        return True


class ResendEmailBackend(EmailBackend):
    """Sends through the Resend HTTP API."""

    API_URL = "https://api.resend.com/emails"

    def __init__(self, api_key: str, from_address: str):
        self.api_key = api_key
        self.from_address = from_address

    def payload(self, to: str, subject: str, html: str, text: str | None) -> dict[str, Any]:
        body: dict[str, Any] = {"from": self.from_address, "to": [to], "subject": subject, "html": html}
        if text:
            body["text"] = text
        return body

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> bool:
        try:
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.post(
                    self.API_URL,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=self.payload(to, subject, html, text),
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Resend rejected {subject!r} to {to}: {e.response.status_code} {e.response.text}")
            return False
        except Exception as e:
            logger.error(f"Resend delivery of {subject!r} to {to} failed: {e}")
            return False

        logger.info(f"Sent {subject!r} to {to} via Resend")
        return True


def get_email_backend() -> EmailBackend:
    """Build the backend selected by ``settings.email_backend``."""
    backend = settings.email_backend
    if backend == "console":
        return ConsoleEmailBackend()
    if backend == "smtp":
        return SMTPEmailBackend(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            from_address=settings.email_from,
        )
    if backend == "resend":
        return ResendEmailBackend(api_key=settings.resend_api_key, from_address=settings.email_from)
    raise ValueError(f"Unknown email backend: {backend}")


def _render(heading: str, intro: str, link: str, button: str) -> str:
    safe_link = html_lib.escape(link, quote=True)
    return f"""
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="color: #1a1a1a;">{heading}</h1>
    <p>{intro}</p>
    <p style="text-align: center; margin: 30px 0;">
        <a href="{safe_link}" style="background: #2563eb; color: white; padding: 12px 30px; border-radius: 6px; text-decoration: none;">{button}</a>
    </p>
    <p style="color: #666; font-size: 12px;">
        If you can't click the button above, copy and paste this link into your browser:<br>
        {safe_link}
    </p>
</body>
</html>
"""


class EmailService:
    """Sends account emails and tracks fire-and-forget deliveries."""

    def __init__(self, backend: EmailBackend | None = None):
        self._backend = backend
        self._pending: set[asyncio.Task[bool]] = set()

    @property
    def backend(self) -> EmailBackend:
        """Lazy-load the backend."""
        if self._backend is None:
            self._backend = get_email_backend()
        return self._backend

    @property
    def pending(self) -> int:
        """Number of background deliveries still running."""
        return len(self._pending)

    async def send_verification_email(self, to: str, code: str) -> bool:
        """Send the account verification link for a freshly registered user."""
        link = f"{settings.app_url}/account/verify?code={code}"
        minutes = settings.verification_code_expiration_minutes
        html = _render(
            heading="Verify your account",
            intro=f"Please click the link below to verify your account. It expires in {minutes} minutes.",
            link=link,
            button="Verify account",
        )
        text = (
            "Verify your account\n\n"
            f"Open the link below to verify your account. It expires in {minutes} minutes.\n\n"
            f"{link}\n"
        )
        return await self.backend.send(to=to, subject="Verify your email address", html=html, text=text)

    async def send_password_reset_email(self, to: str, code: str) -> bool:
        """Send a password reset link."""
        link = f"{settings.app_url}/account/password-reset?code={code}"
        minutes = settings.verification_code_expiration_minutes
        html = _render(
            heading="Reset your password",
            intro=(
                f"Someone asked to reset the password for this account. The link expires in {minutes} minutes. "
                "If it wasn't you, you can ignore this email."
            ),
            link=link,
            button="Choose a new password",
        )
        text = (
            "Reset your password\n\n"
            f"Open the link below to choose a new password. It expires in {minutes} minutes.\n"
            "If you didn't ask for this, you can ignore this email.\n\n"
            f"{link}\n"
        )
        return await self.backend.send(to=to, subject="Reset your password", html=html, text=text)

    def dispatch(self, send: Coroutine[Any, Any, bool], description: str) -> asyncio.Task[bool]:
        """Run ``send`` in the background without waiting for it.

        Failures are logged and never reach the caller.
        """
        task = asyncio.create_task(send)
        self._pending.add(task)

        def _done(finished: asyncio.Task[bool]) -> None:
            self._pending.discard(finished)
            if finished.cancelled():
                logger.warning(f"Email delivery cancelled: {description}")
            elif finished.exception() is not None:
                logger.error(f"Email delivery crashed: {description}", exc_info=finished.exception())
            elif not finished.result():
                logger.warning(f"Email delivery failed: {description}")

        task.add_done_callback(_done)
        return task

    async def drain(self) -> None:
        """Wait for all background deliveries to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)


# Global email service instance
email_service = EmailService()
