"""Tests for gitcookies credential resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from gerrit_digest.exceptions import ConfigurationError
from gerrit_digest.gitcookies import (
    Credential,
    host_matches,
    load_credentials,
    parse_gitcookies,
    select_credential,
)


def _line(domain: str, value: str = "git-dev.example.com=token123", name: str = "o") -> str:
    return "\t".join([domain, "FALSE", "/", "TRUE", "2147483647", name, value])


def _write(tmp_path: Path, *lines: str) -> Path:
    path = tmp_path / ".gitcookies"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.mark.parametrize(
    ("domain", "host", "expected"),
    [
        ("gerrit.example.com", "gerrit.example.com", True),
        ("gerrit.example.com", "review.gerrit.example.com", False),
        ("other.example.com", "gerrit.example.com", False),
        (".example.com", "example.com", True),
        (".example.com", "gerrit.example.com", True),
        (".example.com", "badexample.com", False),
        (".googlesource.com", "fuchsia-review.googlesource.com", True),
    ],
)
def test_host_matches(domain, host, expected):
    assert host_matches(domain, host) is expected


def test_parse_skips_comments_blanks_and_malformed_lines():
    text = "\n".join(
        [
            "# Netscape HTTP Cookie File",
            "",
            "   ",
            "gerrit.example.com\tFALSE\t/\tTRUE\to\tuser=token",  # 6 fields
            _line("gerrit.example.com") + "\textra",  # 8 fields
            _line("gerrit.example.com"),
        ]
    )

    records = list(parse_gitcookies(text))

    assert len(records) == 1
    assert records[0].domain == "gerrit.example.com"
    assert records[0].name == "o"


def test_select_credential_splits_on_first_equals():
    records = parse_gitcookies(_line("gerrit.example.com", value="git-dev=abc=def"))

    credential = select_credential(records, "gerrit.example.com")

    assert credential == Credential(host="gerrit.example.com", username="git-dev", token="abc=def")


def test_select_credential_requires_o_cookie_name():
    records = parse_gitcookies(_line("gerrit.example.com", name="SID"))

    assert select_credential(records, "gerrit.example.com") is None


def test_select_credential_returns_first_match():
    text = "\n".join(
        [
            _line("other.example.com", value="wrong=one"),
            _line(".example.com", value="first=match"),
            _line("gerrit.example.com", value="second=match"),
        ]
    )

    credential = select_credential(parse_gitcookies(text), "gerrit.example.com")

    assert credential is not None
    assert credential.username == "first"
    assert credential.token == "match"


def test_select_credential_skips_values_without_token():
    text = "\n".join(
        [
            _line("gerrit.example.com", value="no-token-here"),
            _line("gerrit.example.com", value="user=token"),
        ]
    )

    credential = select_credential(parse_gitcookies(text), "gerrit.example.com")

    assert credential is not None
    assert credential.username == "user"


def test_load_credentials_reads_file(tmp_path):
    path = _write(tmp_path, "# comment", _line("gerrit.example.com"))

    credential = load_credentials("https://gerrit.example.com", path)

    assert credential.host == "gerrit.example.com"
    assert credential.username == "git-dev.example.com"
    assert credential.token == "token123"


def test_load_credentials_missing_file_names_host(tmp_path):
    with pytest.raises(ConfigurationError) as excinfo:
        load_credentials("https://gerrit.example.com/", tmp_path / "missing")

    message = str(excinfo.value)
    assert excinfo.value.host == "gerrit.example.com"
    assert "not found" in message
    assert "gerrit.example.com\tTRUE\t/\tTRUE\t<timestamp>\to\t<username>=<password>" in message


def test_load_credentials_without_match_names_host(tmp_path):
    path = _write(tmp_path, _line("other.example.com"))

    with pytest.raises(ConfigurationError) as excinfo:
        load_credentials("https://gerrit.example.com", path)

    assert excinfo.value.host == "gerrit.example.com"
    assert "Credentials for gerrit.example.com" in str(excinfo.value)
    assert "<username>=<password>" in str(excinfo.value)


def test_load_credentials_rejects_url_without_host(tmp_path):
    path = _write(tmp_path, _line("gerrit.example.com"))

    with pytest.raises(ConfigurationError) as excinfo:
        load_credentials("not a url", path)

    assert "Cannot parse hostname" in str(excinfo.value)
    assert "<username>=<password>" in str(excinfo.value)


def test_credential_repr_hides_token():
    credential = Credential(host="h", username="u", token="secret")

    assert "secret" not in repr(credential)


def test_load_credentials_unreadable_path_names_host(tmp_path):
    directory = tmp_path / "cookies-dir"
    directory.mkdir()

    with pytest.raises(ConfigurationError) as excinfo:
        load_credentials("https://gerrit.example.com", directory)

    assert excinfo.value.host == "gerrit.example.com"
    assert "Could not read gitcookies file" in str(excinfo.value)
    assert "gerrit.example.com\tTRUE\t/\tTRUE\t<timestamp>\to\t<username>=<password>" in str(excinfo.value)


def test_load_credentials_non_utf8_file_names_host(tmp_path):
    path = tmp_path / ".gitcookies"
    path.write_bytes(b"\xff\xfe\x00gerrit.example.com\t\x80\n")

    with pytest.raises(ConfigurationError) as excinfo:
        load_credentials("https://gerrit.example.com", path)

    assert excinfo.value.host == "gerrit.example.com"
    assert "<username>=<password>" in str(excinfo.value)
