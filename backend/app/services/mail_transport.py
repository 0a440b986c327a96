"""
Outbound Mail Transport.

Abstraction over the mail relay used for breach alerts and notifications.
Callers get back a MailResult; a transport may also raise MailTransportError.
Both outcomes are treated as a failed delivery by the callers.

DO NOT import from notification_service.py or incident_service.py; this is a lower-level abstraction.
"""
import asyncio
import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Optional

from pydantic import BaseModel

from backend.app.core.exceptions import MailTransportError
from backend.app.core.logging import get_logger

logger = get_logger(__name__)


class MailResult(BaseModel):
    """Standardised outcome from any mail transport."""
    success: bool
    message: Optional[str] = None
    message_id: Optional[str] = None


class SMTPConfig(BaseModel):
    """Connection settings for an SMTP relay."""
    host: Optional[str] = None
    port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True
    from_name: str = "Urology Patient Management System"
    timeout_seconds: float = 30.0

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.username and self.password)


class MailTransport(ABC):
    """Abstract base class for mail transports."""

    @abstractmethod
    async def send(self, to_email: str, subject: str, body: str, is_html: bool = True) -> MailResult:
        """Deliver one message to one recipient."""
        ...


class SMTPMailTransport(MailTransport):
    """SMTP implementation. The blocking smtplib session runs in a worker thread."""

    def __init__(self, config: SMTPConfig):
        self.config = config

    async def send(self, to_email: str, subject: str, body: str, is_html: bool = True) -> MailResult:
        if not self.config.is_configured:
            logger.warning("SMTP is not configured (SMTP_HOST, SMTP_USER, SMTP_PASSWORD); message not sent")
            return MailResult(success=False, message="SMTP is not configured")

        message = self._build_message(to_email, subject, body, is_html)
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self._deliver, message),
                timeout=self.config.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            error = f"SMTP send to {to_email} timed out after {self.config.timeout_seconds}s"
            logger.error(error)
            raise MailTransportError(error) from e
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP send to {to_email} failed: {e}")
            raise MailTransportError(str(e) or "Email sending failed") from e

        logger.info(f"Notification email sent to {to_email} (Message ID: {message['Message-ID']})")
        return MailResult(success=True, message="Notification email sent successfully", message_id=message["Message-ID"])

    def _build_message(self, to_email: str, subject: str, body: str, is_html: bool) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((self.config.from_name, self.config.username))
        message["To"] = to_email
        message["Message-ID"] = make_msgid()
        if is_html:
            message.set_content("This message requires an HTML capable mail client.")
            message.add_alternative(body, subtype="html")
        else:
            message.set_content(body)
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.config.host, self.config.port, timeout=self.config.timeout_seconds) as smtp:
            if self.config.use_tls:
                smtp.starttls()
            smtp.login(self.config.username, self.config.password)
            smtp.send_message(message)


def get_mail_transport() -> MailTransport:
    """
    Factory function. Returns the SMTP transport configured from settings.

    Used as a FastAPI dependency so tests can swap in a recording transport.
    """
    from backend.app.core.config import get_settings
    settings = get_settings()

    return SMTPMailTransport(SMTPConfig(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
        from_name=settings.smtp_from_name,
        timeout_seconds=settings.smtp_timeout_seconds,
    ))
