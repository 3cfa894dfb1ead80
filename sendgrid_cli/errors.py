"""Exceptions raised while composing and delivering a message.

Two families exist.  :class:`ValidationError` subclasses are raised while the
message is being built, always before any network call.  :class:`DeliveryError`
subclasses are raised by the senders once a request has been attempted.  The
command-line entry point catches :class:`SendgridCliError` in one place and
turns it into a log line and an exit code.
"""

from __future__ import annotations

from typing import Optional


class SendgridCliError(Exception):
    """Base class for all errors reported by the command."""

    exit_code: int = 1


class ValidationError(SendgridCliError):
    exit_code = 2


class InvalidAddressError(ValidationError):
    pass


class MissingBodyError(ValidationError):
    pass


class TooManyArgumentsError(ValidationError):
    pass


class MissingCredentialsError(ValidationError):
    pass


class MissingSubjectError(ValidationError):
    pass


class MissingRecipientError(ValidationError):
    pass


class InvalidSubstitutionError(ValidationError):
    pass


class FileReadError(ValidationError):
    """A body, attachment or config file could not be read."""

    def __init__(self, path: str, reason: object) -> None:
        super().__init__(f"Failed to read the file {path!r}: {reason}")
        self.path = path


class ConfigError(ValidationError):
    pass


class DeliveryError(SendgridCliError):
    """The request was attempted and did not succeed."""


class TransportError(DeliveryError):
    pass


class ProviderError(DeliveryError):
    """SendGrid answered with a non-2xx status."""

    def __init__(self, status_code: int, body: Optional[str] = None) -> None:
        message = f"SendGrid rejected the request with status {status_code}"
        if body:
            message = f"{message}: {body}"
        super().__init__(message)
        self.status_code = status_code
        self.body = body


__all__ = [
    "SendgridCliError",
    "ValidationError",
    "InvalidAddressError",
    "MissingBodyError",
    "TooManyArgumentsError",
    "MissingCredentialsError",
    "MissingSubjectError",
    "MissingRecipientError",
    "InvalidSubstitutionError",
    "FileReadError",
    "ConfigError",
    "DeliveryError",
    "TransportError",
    "ProviderError",
]
