"""
app/services/mail_service.py

Purpose: Outbound email (OTP delivery)

- Plain text + HTML message via SMTP
- STARTTLS or implicit TLS depending on SMTP_USE_SSL
- Blocking smtplib calls run in a worker thread
"""

import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

from app.core.config import settings
from app.core.exceptions import ExternalServiceError
from app.core.logging import get_logger

logger = get_logger(__name__)


class MailService:
    """Service for sending transactional email over SMTP"""

    def __init__(self):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.use_ssl = settings.SMTP_USE_SSL
        self.sender = settings.MAIL_FROM or settings.SMTP_USER or "no-reply@livabhi.com"

    def is_configured(self) -> bool:
        return bool(self.host and self.user and self.password)

    def _build_message(self, to: str, subject: str, text: str, html: Optional[str]) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = f"{settings.APP_NAME} <{self.sender}>"
        msg["To"] = to
        msg.set_content(text)
        if html:
            msg.add_alternative(html, subtype="html")
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        ctx = ssl.create_default_context()
        if self.use_ssl:
            with smtplib.SMTP_SSL(self.host, self.port, context=ctx, timeout=10) as s:
                s.login(self.user, self.password)
                s.send_message(msg)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=10) as s:
                s.starttls(context=ctx)
                s.login(self.user, self.password)
                s.send_message(msg)

    async def send_email(self, to: str, subject: str, text: str, html: Optional[str] = None) -> None:
        """
        Raises:
            ExternalServiceError: SMTP not configured or delivery failed
        """
        if not self.is_configured():
            raise ExternalServiceError("Email service is not configured")

        msg = self._build_message(to, subject, text, html)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Error sending email to {to}: {e}")
            raise ExternalServiceError("Failed to send email") from e

        logger.info(f"Email sent to {to}: {subject}")

    async def send_otp_email(self, to: str, otp: str, purpose: str = "Verification") -> None:
        subject = f"{settings.APP_NAME} - {purpose} OTP"
        minutes = settings.OTP_EXPIRY_MINUTES
        text = (
            f"Your OTP is: {otp}\n\n"
            f"This OTP will expire in {minutes} minutes.\n"
            "If you didn't request this OTP, please ignore this email."
        )
        html = (
            f"<div style=\"font-family: Arial, sans-serif;\">"
            f"<h2>{settings.APP_NAME}</h2>"
            f"<p>Your OTP code is:</p>"
            f"<h1 style=\"letter-spacing: 4px;\">{otp}</h1>"
            f"<p>This OTP will expire in {minutes} minutes.</p>"
            f"<p>If you didn't request this OTP, please ignore this email.</p>"
            f"</div>"
        )
        await self.send_email(to, subject, text, html)


# Singleton instance
mail_service = MailService()
