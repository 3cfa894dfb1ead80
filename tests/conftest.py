import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class FakeResponse:
    def __init__(
        self,
        status_code: int = 202,
        text: str = "",
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.status_code = status_code
        self.text = text
        self.headers = headers or {"X-Message-Id": "abc123"}


class RecordingPost:
    """Stand-in for ``requests.post`` that records every call."""

    def __init__(self, response: Optional[FakeResponse] = None) -> None:
        self.response = response or FakeResponse()
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        return self.response


@pytest.fixture
def fake_post(monkeypatch: pytest.MonkeyPatch) -> RecordingPost:
    import requests

    recorder = RecordingPost()
    monkeypatch.setattr(requests, "post", recorder)
    return recorder


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    for name in (
        "SENDGRID_API_KEY",
        "SENDGRID_USER",
        "SENDGRID_PASSWORD",
        "SENDGRID_FROM",
        "SENDGRID_V3_URL",
        "SENDGRID_V2_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path
