"""Mail backends."""

from .abstract_mailer import AbstractMailer, MailDeliveryError, MailMessage
from .console_mailer import ConsoleMailer
from .factory import get_mailer, init_mailer
from .smtp_mailer import SmtpMailer

__all__ = [
    "AbstractMailer",
    "ConsoleMailer",
    "MailDeliveryError",
    "MailMessage",
    "SmtpMailer",
    "get_mailer",
    "init_mailer",
]
