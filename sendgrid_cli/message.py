"""Message data model and the helpers that build it from raw CLI values.

A :class:`Message` is created once per run by :func:`build_message`, handed to
exactly one sender and then discarded.  All records are frozen dataclasses so
nothing downstream can alter what was validated here.
"""

from __future__ import annotations

import base64
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Tuple

from sendgrid_cli.errors import (
    FileReadError,
    InvalidAddressError,
    InvalidSubstitutionError,
    MissingBodyError,
    MissingRecipientError,
    MissingSubjectError,
)

LOGGER = logging.getLogger(__name__)

HTML_TYPE = "text/html"
PLAIN_TYPE = "text/plain"
DEFAULT_ATTACHMENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class Address:
    display_name: str
    address: str


@dataclass(frozen=True)
class ContentPart:
    mime_type: str
    value: str


@dataclass(frozen=True)
class Attachment:
    filename: str
    mime_type: str
    content: str
    disposition: str = "attachment"

    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.content)


@dataclass(frozen=True)
class Substitution:
    placeholder: str
    value: str

    @property
    def token(self) -> str:
        """The placeholder as it appears inside a template, e.g. ``[%name%]``."""
        return f"[%{self.placeholder}%]"


@dataclass(frozen=True)
class Message:
    sender: Address
    to: Tuple[Address, ...]
    subject: str
    cc: Tuple[Address, ...] = ()
    contents: Tuple[ContentPart, ...] = ()
    attachments: Tuple[Attachment, ...] = ()
    template_id: Optional[str] = None
    substitutions: Tuple[Substitution, ...] = ()

    def content_of(self, mime_type: str) -> str:
        for part in self.contents:
            if part.mime_type == mime_type:
                return part.value
        return ""

    @property
    def html(self) -> str:
        return self.content_of(HTML_TYPE)

    @property
    def plain(self) -> str:
        return self.content_of(PLAIN_TYPE)


def parse_address(raw: str) -> Address:
    """Turn ``"Full Name <user@domain>"`` or ``"user@domain"`` into an Address.

    The value is split on the literal ``" <"``.  A single token is used as
    both display name and address; otherwise the first token is the display
    name and the second the address.  Any further tokens are dropped with a
    warning.  This is a narrow heuristic and not RFC 5322 parsing.

    Raises:
        InvalidAddressError: If ``raw`` is empty or leaves no address token.
    """
    if not raw:
        raise InvalidAddressError("Missing email address.")
    parts = raw.split(" <")
    if parts[0] == "":
        raise InvalidAddressError(f"Email address is incorrect: {raw}")
    parts = [part.strip(" ><") for part in parts]
    if len(parts) > 2:
        LOGGER.warning("Ignoring trailing parts of the address %r: %s", raw, parts[2:])

    if len(parts) < 2:
        name = address = parts[0]
    else:
        name, address = parts[0], parts[1]
    if not address:
        raise InvalidAddressError(f"Email address is incorrect: {raw}")
    return Address(display_name=name or address, address=address)


def parse_substitution(raw: str) -> Substitution:
    """Split a ``key=value`` pair on the first ``=``."""
    key, sep, value = raw.partition("=")
    if not sep:
        raise InvalidSubstitutionError(f"Incorrect substitution: {raw!r} (expected key=value)")
    return Substitution(placeholder=key, value=value)


def guess_mime_type(filename: str) -> str:
    ctype, encoding = mimetypes.guess_type(filename)
    if ctype is None or encoding is not None:
        return DEFAULT_ATTACHMENT_TYPE
    return ctype


def load_attachment(path: str) -> Attachment:
    """Read ``path`` and return it as a base64-encoded attachment."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise FileReadError(path, exc) from exc
    filename = Path(path).name
    LOGGER.debug("Adding the attachment %r (%d bytes)", filename, len(data))
    return Attachment(
        filename=filename,
        mime_type=guess_mime_type(filename),
        content=base64.b64encode(data).decode("ascii"),
    )


def build_contents(html: str, plain: str) -> Tuple[ContentPart, ...]:
    """Return the content parts ordered plain first, skipping empty values."""
    parts = [ContentPart(PLAIN_TYPE, plain), ContentPart(HTML_TYPE, html)]
    return tuple(part for part in parts if part.value)


def build_message(
    *,
    sender: str,
    to: Iterable[str],
    subject: str,
    html: str = "",
    plain: str = "",
    cc: Iterable[str] = (),
    attachments: Iterable[str] = (),
    template_id: Optional[str] = None,
    substitutions: Iterable[str] = (),
) -> Message:
    """Validate raw CLI values and assemble the :class:`Message`.

    Args:
        sender: Raw ``--from`` value.
        to: Raw ``--to`` values; at least one is required.
        subject: Message subject; must not be empty.
        html: Negotiated HTML body.
        plain: Negotiated plain-text body.
        cc: Raw ``--cc`` values.
        attachments: Paths of files to attach.
        template_id: Optional SendGrid template identifier.  Without one at
            least one of ``html`` and ``plain`` must be non-empty.
        substitutions: Raw ``key=value`` pairs, used only with a template.

    Raises:
        ValidationError: Any of its subclasses when the input is unusable.
    """
    if not subject:
        raise MissingSubjectError(
            "The subject is required. You can get around this requirement if you use "
            "a template with a subject defined or if every personalization has a "
            "subject defined."
        )
    to_addresses = tuple(parse_address(raw) for raw in to)
    if not to_addresses:
        raise MissingRecipientError(
            "At least one recipient should be present. Use the -t or --to flag to specify one."
        )
    cc_addresses = tuple(parse_address(raw) for raw in cc)
    from_address = parse_address(sender)

    subs: Tuple[Substitution, ...] = ()
    raw_subs = list(substitutions)
    if template_id:
        subs = tuple(parse_substitution(raw) for raw in raw_subs)
        for sub in subs:
            LOGGER.debug("Added substitution %r with the value %r", sub.token, sub.value)
    elif raw_subs:
        LOGGER.warning("Ignoring %d substitution(s): no template id given", len(raw_subs))

    contents = build_contents(html, plain)
    if not contents and not template_id:
        raise MissingBodyError("Missing message body: both the HTML and plain-text bodies are empty.")

    return Message(
        sender=from_address,
        to=to_addresses,
        subject=subject,
        cc=cc_addresses,
        contents=contents,
        attachments=tuple(load_attachment(path) for path in attachments),
        template_id=template_id or None,
        substitutions=subs,
    )


__all__ = [
    "Address",
    "Attachment",
    "ContentPart",
    "Message",
    "Substitution",
    "build_contents",
    "build_message",
    "guess_mime_type",
    "load_attachment",
    "parse_address",
    "parse_substitution",
]
