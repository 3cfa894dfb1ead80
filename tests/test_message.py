import base64
from pathlib import Path

import pytest

from sendgrid_cli.errors import (
    FileReadError,
    InvalidSubstitutionError,
    MissingBodyError,
    MissingRecipientError,
    MissingSubjectError,
)
from sendgrid_cli.message import (
    Address,
    build_contents,
    build_message,
    guess_mime_type,
    load_attachment,
    parse_substitution,
)


def test_contents_are_plain_then_html() -> None:
    parts = build_contents(html="<p>x</p>", plain="x")
    assert [p.mime_type for p in parts] == ["text/plain", "text/html"]


def test_empty_contents_are_skipped() -> None:
    parts = build_contents(html="<p>x</p>", plain="")
    assert [p.mime_type for p in parts] == ["text/html"]


def test_build_message_with_cc() -> None:
    message = build_message(
        sender="Reports <reports@example.com>",
        to=["a@example.com", "Bee <b@example.com>"],
        cc=["c@example.com"],
        subject="Weekly",
        plain="hello",
    )
    assert message.sender == Address("Reports", "reports@example.com")
    assert [a.address for a in message.to] == ["a@example.com", "b@example.com"]
    assert [a.address for a in message.cc] == ["c@example.com"]
    assert message.plain == "hello"
    assert message.html == ""


def test_subject_is_required() -> None:
    with pytest.raises(MissingSubjectError):
        build_message(sender="a@example.com", to=["b@example.com"], subject="", plain="x")


def test_recipient_is_required() -> None:
    with pytest.raises(MissingRecipientError):
        build_message(sender="a@example.com", to=[], subject="s", plain="x")


def test_substitutions_need_a_template() -> None:
    message = build_message(
        sender="a@example.com", to=["b@example.com"], subject="s", plain="x", substitutions=["name=Jo"]
    )
    assert message.substitutions == ()

    message = build_message(
        sender="a@example.com",
        to=["b@example.com"],
        subject="s",
        template_id="tpl-1",
        substitutions=["name=John Doe", "expr=a=b"],
    )
    assert [(s.token, s.value) for s in message.substitutions] == [
        ("[%name%]", "John Doe"),
        ("[%expr%]", "a=b"),
    ]


def test_invalid_substitution() -> None:
    with pytest.raises(InvalidSubstitutionError):
        parse_substitution("no-separator")


def test_load_attachment(tmp_path: Path) -> None:
    path = tmp_path / "report.pdf"
    path.write_bytes(b"%PDF-1.4 data")
    attachment = load_attachment(str(path))
    assert attachment.filename == "report.pdf"
    assert attachment.mime_type == "application/pdf"
    assert attachment.disposition == "attachment"
    assert base64.b64decode(attachment.content) == b"%PDF-1.4 data"
    assert attachment.raw_bytes() == b"%PDF-1.4 data"


def test_missing_attachment(tmp_path: Path) -> None:
    with pytest.raises(FileReadError):
        load_attachment(str(tmp_path / "nope.bin"))


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("notes.txt", "text/plain"),
        ("photo.png", "image/png"),
        ("blob.unknownext", "application/octet-stream"),
        ("archive.tar.gz", "application/octet-stream"),
    ],
)
def test_guess_mime_type(filename: str, expected: str) -> None:
    assert guess_mime_type(filename) == expected


def test_body_is_required_without_template() -> None:
    with pytest.raises(MissingBodyError):
        build_message(sender="a@example.com", to=["b@example.com"], subject="s", html="", plain="")


def test_template_may_stand_in_for_body() -> None:
    message = build_message(sender="a@example.com", to=["b@example.com"], subject="s", template_id="tpl-1")
    assert message.contents == ()
    assert message.template_id == "tpl-1"
