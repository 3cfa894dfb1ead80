"""Top-level package for the sendgrid-cli application.

This package composes a single email from command-line input and submits it
to SendGrid, either through the v3 JSON API (API key) or the legacy v2 form
API (username and password).  Subpackages and modules split the work into
address and body handling, payload building and delivery.

The ``__all__`` variable enumerates the primary public modules for
convenience when using ``from sendgrid_cli import ...``.
"""

from __future__ import annotations

__all__ = [
    "cli",
    "config",
    "content",
    "errors",
    "mailer",
    "message",
]

# SemVer version of the package
__version__: str = "0.2.0"
