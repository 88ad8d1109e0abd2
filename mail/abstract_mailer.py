"""Mail delivery abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class MailDeliveryError(RuntimeError):
    """Raised when a backend could not hand a message over for delivery."""


@dataclass(frozen=True)
class MailMessage:
    to: str
    subject: str
    text: str
    html: str | None = None


class AbstractMailer(ABC):
    """Interface for mail backends."""

    @abstractmethod
    def send(self, message: MailMessage) -> str:
        """Deliver ``message`` and return its Message-ID."""
