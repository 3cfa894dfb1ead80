"""Abstract interface and implementations for delivering a message.

This subpackage defines a common ``send`` interface along with two concrete
implementations: one targeting the SendGrid v3 JSON API and another targeting
the legacy v2 form API.  :func:`select_sender` picks one from the configured
credentials so the command does not need to know which API is in use.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict

from sendgrid_cli.config import Settings
from sendgrid_cli.errors import MissingCredentialsError
from sendgrid_cli.message import Message

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SendResult:
    """What the provider answered to a successful request."""

    status_code: int
    body: str = ""
    headers: Dict[str, str] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, object]:
        return {"status_code": self.status_code, "headers": dict(self.headers), "body": self.body}


class EmailSender(ABC):
    """Abstract base class for email senders.

    Implementations must provide a ``send`` method that performs exactly one
    HTTP request and never retries.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    @abstractmethod
    def send(self, message: Message) -> SendResult:
        """Send a single email message.

        Args:
            message: The validated message to deliver.

        Returns:
            The provider's status, body and headers.

        Raises:
            TransportError: The request could not be completed.
            ProviderError: The provider answered with a non-2xx status.
        """
        raise NotImplementedError


def select_sender(settings: Settings) -> EmailSender:
    """Return the v3 sender when an API key is set, else the legacy sender."""
    # Submodules import this package, so they are loaded lazily.
    if settings.api_key:
        from sendgrid_cli.mailer.v3_sender import V3Sender

        return V3Sender(settings)
    if settings.username:
        from sendgrid_cli.mailer.v2_sender import V2Sender

        return V2Sender(settings)

    LOGGER.info("Missing username. Please use --user and --password options.")
    LOGGER.info("Missing SendGrid API key. Use --key option or SENDGRID_API_KEY.")
    raise MissingCredentialsError(
        "Either a SendGrid API key or a username and password should be present."
    )


__all__ = ["EmailSender", "SendResult", "select_sender"]
