"""Mail backend that logs messages instead of sending them."""

from __future__ import annotations

import logging
from email.utils import make_msgid

from .abstract_mailer import AbstractMailer, MailMessage

logger = logging.getLogger(__name__)


class ConsoleMailer(AbstractMailer):
    """Development backend: log each message and keep it in ``outbox``."""

    def __init__(self):
        self.outbox: list[MailMessage] = []

    def send(self, message: MailMessage) -> str:
        message_id = make_msgid(domain="localhost")
        self.outbox.append(message)
        logger.info(
            "Message %s to %s (not sent, console backend)\nSubject: %s\n\n%s",
            message_id,
            message.to,
            message.subject,
            message.text,
        )
        return message_id
