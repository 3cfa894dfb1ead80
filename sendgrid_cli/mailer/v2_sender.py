"""Legacy SendGrid v2 (form-encoded, username/password) sender.

The message is flattened into form fields.  Without attachments the request
is ``application/x-www-form-urlencoded``; with attachments it becomes
``multipart/form-data`` with one ``files[<name>]`` part per file.  Templates
and substitutions have no equivalent here and are dropped with a warning.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import requests

from sendgrid_cli.errors import ProviderError, TransportError
from sendgrid_cli.mailer import EmailSender, SendResult
from sendgrid_cli.message import Address, Message

LOGGER = logging.getLogger(__name__)

Field = Tuple[str, str]
FilePart = Tuple[str, Tuple[str, bytes, str]]


def _address_fields(prefix: str, addresses: Tuple[Address, ...]) -> List[Field]:
    fields = [(f"{prefix}[]", a.address) for a in addresses]
    fields += [(f"{prefix}name[]", a.display_name) for a in addresses]
    return fields


def build_v2_fields(message: Message, username: str, password: Optional[str]) -> List[Field]:
    """Return the ordered form fields; repeated keys carry list values."""
    fields: List[Field] = [
        ("api_user", username),
        ("api_key", password or ""),
        ("subject", message.subject),
        ("from", message.sender.address),
        ("fromname", message.sender.display_name),
    ]
    fields += _address_fields("to", message.to)
    if message.cc:
        fields += _address_fields("cc", message.cc)
    if message.html:
        fields.append(("html", message.html))
    if message.plain:
        fields.append(("text", message.plain))
    return fields


def build_v2_files(message: Message) -> List[FilePart]:
    return [
        (f"files[{a.filename}]", (a.filename, a.raw_bytes(), a.mime_type))
        for a in message.attachments
    ]


class V2Sender(EmailSender):
    """Legacy form API implementation of the ``EmailSender`` interface."""

    def send(self, message: Message) -> SendResult:
        settings = self._settings
        if message.template_id:
            LOGGER.warning(
                "Template %s is not supported by the legacy API; sending without it",
                message.template_id,
            )
        fields = build_v2_fields(message, settings.username or "", settings.password)
        files = build_v2_files(message)
        try:
            if files:
                response = requests.post(
                    settings.v2_url, data=fields, files=files, timeout=settings.timeout
                )
            else:
                response = requests.post(settings.v2_url, data=fields, timeout=settings.timeout)
        except requests.RequestException as exc:
            raise TransportError(f"Failed to send the email: {exc}") from exc

        LOGGER.info("Status Code: %d", response.status_code)
        body = response.text
        if settings.debug:
            LOGGER.info("Headers:")
            LOGGER.info("========")
            for name, value in response.headers.items():
                LOGGER.info("%s:\t%s", name, value)
            LOGGER.info("%s", body)
        if not 200 <= response.status_code < 300:
            raise ProviderError(response.status_code, body)
        return SendResult(status_code=response.status_code, body=body, headers=dict(response.headers))


__all__ = ["V2Sender", "build_v2_fields", "build_v2_files"]
