"""
Mail transport for caregiver alerts.

The services only know the MailTransport protocol; SmtpMailTransport is the
production implementation over implicit-TLS SMTP.
"""

import smtplib
import ssl
from email.message import EmailMessage
from typing import Protocol

import structlog

from heartpi.config import MailConfig

logger = structlog.get_logger(__name__)


class MailTransport(Protocol):
    """Sends one plain-text message. Returns False instead of raising on failure."""

    def send(self, recipient: str, subject: str, body: str) -> bool: ...


class SmtpMailTransport:
    """Sends alerts from the configured account, e.g. a Gmail app password."""

    def __init__(self, config: MailConfig) -> None:
        self.config = config
        self.logger = logger.bind(component="smtp_mail", host=config.smtp_host)

    def build_message(self, recipient: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        # Header values must stay on one line
        message["Subject"] = " ".join(subject.split())
        message["To"] = recipient
        message["From"] = self.config.sender_email or ""
        message.set_content(body, charset="utf-8")
        return message

    def send(self, recipient: str, subject: str, body: str) -> bool:
        if not self.config.has_credentials:
            self.logger.error("mail_credentials_missing")
            return False

        message = self.build_message(recipient, subject, body)
        try:
            with smtplib.SMTP_SSL(
                self.config.smtp_host,
                self.config.smtp_port,
                timeout=self.config.timeout_seconds,
                context=ssl.create_default_context(),
            ) as smtp:
                smtp.login(self.config.sender_email or "", self.config.app_password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            self.logger.error("mail_send_failed", recipient=recipient, error=str(e))
            return False

        self.logger.info("mail_sent", recipient=recipient)
        return True
