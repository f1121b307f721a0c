from __future__ import annotations

import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional, Protocol

from ..core.exceptions import NotificationError

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, *, to: str, subject: str, text: str) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int = 465
    user: Optional[str] = None
    password: Optional[str] = None
    sender_name: str = "Kindergarten"
    timeout: float = 15.0


class SmtpMailer(Mailer):
    """Plain-text mail over SMTP with implicit TLS."""

    def __init__(self, settings: SmtpSettings):
        self._settings = settings

    def build_message(self, *, to: str, subject: str, text: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((self._settings.sender_name, self._settings.user or ""))
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text)
        return msg

    def send(self, *, to: str, subject: str, text: str) -> None:
        s = self._settings
        if not s.user or not s.password:
            raise NotificationError("Email delivery is not configured (missing SMTP credentials)")
        if not to:
            raise NotificationError("Recipient has no email address")

        msg = self.build_message(to=to, subject=subject, text=text)
        try:
            with smtplib.SMTP_SSL(s.host, s.port, timeout=s.timeout, context=ssl.create_default_context()) as smtp:
                smtp.login(s.user, s.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("mail to %s failed: %s", to, e)
            raise NotificationError("Failed to send email", details=[str(e)]) from e
        logger.info("mail sent to %s: %s", to, subject)
