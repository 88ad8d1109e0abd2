"""Build and look up the application's mail backend."""

from __future__ import annotations

from flask import Flask, current_app

from .abstract_mailer import AbstractMailer
from .console_mailer import ConsoleMailer
from .smtp_mailer import SmtpMailer


def init_mailer(app: Flask) -> AbstractMailer:
    """Create the backend named by ``MAIL_BACKEND`` and attach it to ``app``."""

    if app.config.get("MAIL_BACKEND") == "smtp":
        mailer: AbstractMailer = SmtpMailer(
            app.config["SMTP_HOST"],
            app.config.get("SMTP_PORT", 587),
            username=app.config.get("SMTP_USER"),
            password=app.config.get("SMTP_PASS"),
            sender=app.config.get("SMTP_FROM"),
            use_tls=app.config.get("SMTP_USE_TLS", True),
            timeout=app.config.get("SMTP_TIMEOUT", 10.0),
        )
    else:
        mailer = ConsoleMailer()
    app.extensions["mailer"] = mailer
    return mailer


def get_mailer() -> AbstractMailer:
    return current_app.extensions["mailer"]
