"""SendGrid v3 (JSON, API key) sender implementation.

The whole message goes into a single personalization: every ``to`` and
``cc`` recipient shares one content set and one substitution map.  See the
SendGrid v3 mail-send documentation for the payload schema.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import requests

from sendgrid_cli.errors import ProviderError, TransportError
from sendgrid_cli.mailer import EmailSender, SendResult
from sendgrid_cli.message import Address, Attachment, ContentPart, Message, Substitution

LOGGER = logging.getLogger(__name__)


def _address_to_json(address: Address) -> Dict[str, str]:
    return {"email": address.address, "name": address.display_name}


def _address_from_json(data: Dict[str, str]) -> Address:
    email = data["email"]
    return Address(display_name=data.get("name") or email, address=email)


def build_v3_payload(message: Message) -> Dict[str, Any]:
    """Return the v3 mail-send request body for ``message``."""
    personalization: Dict[str, Any] = {"to": [_address_to_json(a) for a in message.to]}
    if message.cc:
        personalization["cc"] = [_address_to_json(a) for a in message.cc]
    if message.template_id and message.substitutions:
        personalization["substitutions"] = {s.token: s.value for s in message.substitutions}

    payload: Dict[str, Any] = {
        "personalizations": [personalization],
        "from": _address_to_json(message.sender),
        "subject": message.subject,
    }
    if message.contents:
        payload["content"] = [{"type": p.mime_type, "value": p.value} for p in message.contents]
    if message.attachments:
        payload["attachments"] = [
            {
                "content": a.content,
                "type": a.mime_type,
                "filename": a.filename,
                "disposition": a.disposition,
            }
            for a in message.attachments
        ]
    if message.template_id:
        payload["template_id"] = message.template_id
    return payload


def message_from_v3_payload(payload: Dict[str, Any]) -> Message:
    """Rebuild a :class:`Message` from a payload made by :func:`build_v3_payload`."""
    personalization = payload["personalizations"][0]
    substitutions: List[Substitution] = []
    for token, value in personalization.get("substitutions", {}).items():
        key = token[2:-2] if token.startswith("[%") and token.endswith("%]") else token
        substitutions.append(Substitution(placeholder=key, value=value))

    return Message(
        sender=_address_from_json(payload["from"]),
        to=tuple(_address_from_json(a) for a in personalization["to"]),
        subject=payload["subject"],
        cc=tuple(_address_from_json(a) for a in personalization.get("cc", [])),
        contents=tuple(ContentPart(c["type"], c["value"]) for c in payload.get("content", [])),
        attachments=tuple(
            Attachment(
                filename=a["filename"],
                mime_type=a["type"],
                content=a["content"],
                disposition=a.get("disposition", "attachment"),
            )
            for a in payload.get("attachments", [])
        ),
        template_id=payload.get("template_id"),
        substitutions=tuple(substitutions),
    )


class V3Sender(EmailSender):
    """SendGrid v3 implementation of the ``EmailSender`` interface."""

    def send(self, message: Message) -> SendResult:
        """POST the message to ``/v3/mail/send`` with bearer authentication.

        Raises:
            TransportError: On connection errors and timeouts.
            ProviderError: If SendGrid does not answer with a 2xx status.
        """
        settings = self._settings
        payload = build_v3_payload(message)
        headers = {"Authorization": f"Bearer {settings.api_key}"}
        LOGGER.debug(
            "Sending v3 request to %s for %d recipient(s)",
            settings.v3_url,
            len(message.to) + len(message.cc),
        )
        try:
            response = requests.post(
                settings.v3_url, json=payload, headers=headers, timeout=settings.timeout
            )
        except requests.RequestException as exc:
            raise TransportError(f"Failed to send the message: {exc}") from exc

        result = SendResult(
            status_code=response.status_code,
            body=response.text,
            headers=dict(response.headers),
        )
        if settings.verbose or settings.debug:
            LOGGER.info("Status Code: %s", result.status_code)
            LOGGER.info("Response Body: %s", result.body)
            LOGGER.info("Response Headers:")
            LOGGER.info("=================")
            for name, value in result.headers.items():
                LOGGER.info("%s: %s", name, value)
        if not 200 <= response.status_code < 300:
            raise ProviderError(response.status_code, response.text)
        return result


__all__ = ["V3Sender", "build_v3_payload", "message_from_v3_payload"]
