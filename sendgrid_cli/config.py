"""Runtime settings and the optional YAML configuration file.

Option values are resolved by the command line layer with the precedence
flag > environment variable > config file > default.  The config file only
provides defaults for the flags; its keys mirror the long flag names::

    key: SG.xxxxx
    from: "Reports <reports@example.com>"
    to:
      - ops@example.com
    verbose: true

Environment variables used:

* ``SENDGRID_API_KEY`` – API key for the v3 API
* ``SENDGRID_USER`` / ``SENDGRID_PASSWORD`` – legacy API credentials
* ``SENDGRID_FROM`` – default sender
* ``SENDGRID_V3_URL`` / ``SENDGRID_V2_URL`` – optional endpoint overrides
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from sendgrid_cli.errors import ConfigError

LOGGER = logging.getLogger(__name__)

CONFIG_FILENAME = ".sendgrid-cli.yaml"
V3_URL = "https://api.sendgrid.com/v3/mail/send"
V2_URL = "https://api.sendgrid.com/api/mail.send.json"
DEFAULT_TIMEOUT = 30.0

KNOWN_KEYS = frozenset(
    {
        "key",
        "user",
        "password",
        "from",
        "to",
        "cc",
        "att",
        "subject",
        "html",
        "plain",
        "template-id",
        "sub",
        "debug",
        "verbose",
        "json",
    }
)
REPEATABLE_KEYS = frozenset({"to", "cc", "att", "sub"})
PARAM_NAMES = {"from": "sender", "template-id": "template_id", "json": "json_output"}


@dataclass(frozen=True)
class Settings:
    """Immutable run configuration passed from the CLI down to the senders."""

    api_key: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    debug: bool = False
    verbose: bool = False
    json_output: bool = False
    v3_url: str = V3_URL
    v2_url: str = V2_URL
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_options(
        cls,
        *,
        api_key: Optional[str],
        username: Optional[str],
        password: Optional[str],
        debug: bool = False,
        verbose: bool = False,
        json_output: bool = False,
    ) -> "Settings":
        # The key variable is only consulted when no credentials were given,
        # so --user keeps selecting the legacy API.
        if not api_key and not username:
            api_key = os.environ.get("SENDGRID_API_KEY")
        return cls(
            api_key=api_key or None,
            username=username or None,
            password=password or None,
            debug=debug,
            verbose=verbose,
            json_output=json_output,
            v3_url=os.environ.get("SENDGRID_V3_URL", V3_URL),
            v2_url=os.environ.get("SENDGRID_V2_URL", V2_URL),
        )


def default_config_path() -> Path:
    return Path.home() / CONFIG_FILENAME


def find_config_file(path: Optional[str] = None) -> Optional[Path]:
    """Return the config file to load, or ``None`` when there is none.

    An explicit ``path`` must exist; the default location is optional.
    """
    if path:
        config_path = Path(path).expanduser()
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        return config_path
    config_path = default_config_path()
    return config_path if config_path.is_file() else None


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """Load option defaults from ``config_path``.

    Keys are normalised to click parameter names (``template-id`` becomes
    ``template_id``, ``from`` becomes ``sender``).  Scalar values given for
    repeatable flags are wrapped in a list.

    Raises:
        ConfigError: The file is unreadable or not a mapping.
    """
    try:
        with open(config_path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to load config file {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    defaults: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in KNOWN_KEYS:
            LOGGER.warning("Ignoring unknown config key %r in %s", key, config_path)
            continue
        if key in REPEATABLE_KEYS and isinstance(value, str):
            value = [value]
        defaults[PARAM_NAMES.get(key, key)] = value
    return defaults


__all__ = ["Settings", "default_config_path", "find_config_file", "load_config_file"]
