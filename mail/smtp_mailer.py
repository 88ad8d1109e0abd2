"""SMTP mail backend."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid, parseaddr

from .abstract_mailer import AbstractMailer, MailDeliveryError, MailMessage

logger = logging.getLogger(__name__)


class SmtpMailer(AbstractMailer):
    """Send mail through an SMTP relay, upgrading to TLS when configured."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        *,
        username: str | None = None,
        password: str | None = None,
        sender: str = '"Auth App" <noreply@example.com>',
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.use_tls = use_tls
        self.timeout = timeout

    def build_message(self, message: MailMessage) -> EmailMessage:
        email = EmailMessage()
        email["From"] = self.sender
        email["To"] = message.to
        email["Subject"] = message.subject
        domain = parseaddr(self.sender)[1].rpartition("@")[2] or None
        email["Message-ID"] = make_msgid(domain=domain)
        email.set_content(message.text)
        if message.html:
            email.add_alternative(message.html, subtype="html")
        return email

    def send(self, message: MailMessage) -> str:
        email = self.build_message(message)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password or "")
                smtp.send_message(email)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Error sending email to %s via %s:%s", message.to, self.host, self.port)
            raise MailDeliveryError(f"Could not send email to {message.to}") from exc

        logger.info("Message sent: %s", email["Message-ID"])
        return email["Message-ID"]
