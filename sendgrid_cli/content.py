"""Decide the HTML and plain-text bodies of the message.

The bodies come either from files (``--html`` / ``--plain``) or from up to
two positional arguments.  Positional arguments carry no type, so an HTML
classifier guesses which one is markup.  The classifier is a plain function
and can be swapped through the ``classifier`` argument of :func:`negotiate`.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

import html2text

from sendgrid_cli.errors import FileReadError, MissingBodyError, TooManyArgumentsError

LOGGER = logging.getLogger(__name__)

MAX_POSITIONAL_BODIES = 2

# Stand-in body for template sends; SendGrid requires some content.
TEMPLATE_PLACEHOLDER_HTML = "<!-- Dummy Content -->"

# A letter-led tag name followed by anything up to the closing bracket.
_HTML_TAG_RE = re.compile(r"<[A-Za-z]\w*[^>]*>")

Classifier = Callable[[str], bool]


def looks_like_html(body: str) -> bool:
    """Return ``True`` if ``body`` contains something shaped like a tag.

    This is a heuristic: ``"a <b> c"`` counts as HTML while an HTML fragment
    made only of entities does not.
    """
    return _HTML_TAG_RE.search(body) is not None


def html_to_plain(html: str) -> str:
    """Render ``html`` as readable plain text, tables included."""
    if not html:
        return ""
    converter = html2text.HTML2Text()
    converter.body_width = 0
    converter.ignore_emphasis = True
    converter.ignore_images = True
    converter.pad_tables = True
    return converter.handle(html).strip()


def read_body_file(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileReadError(path, exc) from exc


def negotiate(
    positional_args: Sequence[str],
    html_file: Optional[str] = None,
    plain_file: Optional[str] = None,
    classifier: Classifier = looks_like_html,
) -> Tuple[str, str]:
    """Return the ``(html, plain)`` bodies for the message.

    Body files win over positional arguments.  Without files the first
    positional argument the classifier accepts becomes the HTML body and the
    other argument, when present and non-empty, the plain-text body.  A lone
    HTML argument gets its plain-text body derived from it.  When nothing
    looks like HTML the first argument is sent as plain text only.

    Raises:
        TooManyArgumentsError: More than two positional arguments.
        MissingBodyError: No usable body at all.
        FileReadError: A body file could not be read.
    """
    if len(positional_args) > MAX_POSITIONAL_BODIES:
        raise TooManyArgumentsError(f"Too many positional arguments: {list(positional_args)}")

    if html_file or plain_file:
        if positional_args:
            LOGGER.warning("Body files given; ignoring positional arguments")
        html = read_body_file(html_file) if html_file else ""
        plain = read_body_file(plain_file) if plain_file else html_to_plain(html)
        return html, plain

    if not positional_args:
        raise MissingBodyError(
            "Missing message body.\n\n"
            "Need to have at least one specified either with --html and/or --plain "
            "options or positional parameters."
        )

    for index, body in enumerate(positional_args):
        if not classifier(body):
            continue
        if len(positional_args) == 1:
            return body, html_to_plain(body)
        return body, positional_args[1 - index]

    if not positional_args[0]:
        raise MissingBodyError("Missing message body.")
    return "", positional_args[0]


def resolve_bodies(
    positional_args: Sequence[str],
    html_file: Optional[str] = None,
    plain_file: Optional[str] = None,
    template_id: Optional[str] = None,
) -> Tuple[str, str]:
    """Like :func:`negotiate`, but a bare template send gets a placeholder body."""
    if template_id and not (html_file or plain_file or positional_args):
        LOGGER.debug("No body given; template %s supplies the content", template_id)
        return TEMPLATE_PLACEHOLDER_HTML, ""
    return negotiate(positional_args, html_file, plain_file)


__all__ = [
    "TEMPLATE_PLACEHOLDER_HTML",
    "html_to_plain",
    "looks_like_html",
    "negotiate",
    "read_body_file",
    "resolve_bodies",
]
