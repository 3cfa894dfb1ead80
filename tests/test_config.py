from pathlib import Path

import pytest

from sendgrid_cli.config import Settings, find_config_file, load_config_file
from sendgrid_cli.errors import ConfigError, MissingCredentialsError
from sendgrid_cli.mailer import select_sender
from sendgrid_cli.mailer.v2_sender import V2Sender
from sendgrid_cli.mailer.v3_sender import V3Sender


def test_default_config_is_optional(clean_env: Path) -> None:
    assert find_config_file(None) is None


def test_default_config_in_home(clean_env: Path) -> None:
    path = clean_env / ".sendgrid-cli.yaml"
    path.write_text("key: SG.home\n", encoding="utf-8")
    assert find_config_file(None) == path


def test_explicit_config_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        find_config_file(str(tmp_path / "missing.yaml"))


def test_load_config_normalises_keys(tmp_path: Path) -> None:
    path = tmp_path / "cfg.yaml"
    path.write_text(
        "from: Reports <reports@example.com>\n"
        "to: ops@example.com\n"
        "template-id: tpl-1\n"
        "json: true\n"
        "colour: blue\n",
        encoding="utf-8",
    )
    assert load_config_file(path) == {
        "sender": "Reports <reports@example.com>",
        "to": ["ops@example.com"],
        "template_id": "tpl-1",
        "json_output": True,
    }


@pytest.mark.parametrize("content", ["- just\n- a list\n", "key: [unclosed\n"])
def test_bad_config(tmp_path: Path, content: str) -> None:
    path = tmp_path / "cfg.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config_file(path)


def test_api_key_from_environment(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SENDGRID_API_KEY", "SG.env")
    assert Settings.from_options(api_key=None, username=None, password=None).api_key == "SG.env"
    # An explicit user keeps the legacy API even when the key variable is set.
    settings = Settings.from_options(api_key=None, username="user", password="pw")
    assert settings.api_key is None


def test_endpoint_overrides(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SENDGRID_V3_URL", "http://localhost:8080/v3/mail/send")
    settings = Settings.from_options(api_key="SG.x", username=None, password=None)
    assert settings.v3_url == "http://localhost:8080/v3/mail/send"


def test_select_sender(clean_env: Path) -> None:
    assert isinstance(select_sender(Settings(api_key="SG.x")), V3Sender)
    assert isinstance(select_sender(Settings(username="user", password="pw")), V2Sender)
    with pytest.raises(MissingCredentialsError):
        select_sender(Settings())
