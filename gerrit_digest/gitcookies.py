"""Gerrit credential resolution from a Netscape-format ``.gitcookies`` file.

The file is written by the Gerrit "Obtain password" flow, one cookie per
line with seven tab-separated fields::

    domain  include_subdomains  path  secure  expiry  name  value

The ``o`` cookie carries ``username=token``, which doubles as the HTTP
Basic credential for the ``/a/`` authenticated REST endpoints.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, NamedTuple, Optional

from .constants import GITCOOKIES_COOKIE_NAME, GITCOOKIES_FIELD_COUNT, GITCOOKIES_FILENAME
from .exceptions import ConfigurationError
from .utils import extract_hostname

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Credential:
    """Username/token pair selected for a single Gerrit host."""

    host: str
    username: str
    token: str

    def __repr__(self) -> str:
        return f"Credential(host={self.host!r}, username={self.username!r}, token='***')"


class CookieRecord(NamedTuple):
    """One well-formed line of a gitcookies file."""

    domain: str
    include_subdomains: str
    path: str
    secure: str
    expiry: str
    name: str
    value: str


def default_gitcookies_path() -> Path:
    return Path.home() / GITCOOKIES_FILENAME


def example_record(host: str) -> str:
    """Return a sample gitcookies line for ``host`` used in error messages."""
    return f"{host}\tTRUE\t/\tTRUE\t<timestamp>\t{GITCOOKIES_COOKIE_NAME}\t<username>=<password>"


def host_matches(domain: str, host: str) -> bool:
    """Check whether a cookie domain applies to ``host``.

    A leading dot makes the domain cover the bare host and every subdomain;
    otherwise the host must match exactly.
    """
    if domain.startswith("."):
        return host == domain[1:] or host.endswith(domain)
    return host == domain


def parse_gitcookies(text: str) -> Iterator[CookieRecord]:
    """Yield well-formed records, skipping comments, blanks and bad lines."""
    for line_no, line in enumerate(text.splitlines(), start=1):
        if line.startswith("#") or not line.strip():
            continue

        parts = line.split("\t")
        if len(parts) != GITCOOKIES_FIELD_COUNT:
            logger.debug(f"Skipping gitcookies line {line_no}: expected {GITCOOKIES_FIELD_COUNT} fields, got {len(parts)}")
            continue

        yield CookieRecord(*parts)


def select_credential(records: Iterator[CookieRecord], host: str) -> Optional[Credential]:
    """Return the first usable ``o`` cookie for ``host``, or None."""
    for record in records:
        if record.name != GITCOOKIES_COOKIE_NAME or not host_matches(record.domain, host):
            continue

        username, _, token = record.value.partition("=")
        if username and token:
            return Credential(host=host, username=username, token=token)
    return None


def load_credentials(server_url: str, path: Optional[Path] = None) -> Credential:
    """Resolve the Gerrit credential for ``server_url``.

    Args:
        server_url: Base URL of the Gerrit server.
        path: gitcookies file, defaults to ``~/.gitcookies``.

    Returns:
        The selected credential.

    Raises:
        ConfigurationError: If the URL has no hostname, the file is missing
            or unreadable, or no record matches the host.
    """
    gitcookies_path = path or default_gitcookies_path()

    host = extract_hostname(server_url)
    if not host:
        raise ConfigurationError(
            f"Invalid Gerrit server URL: {server_url!r}. Cannot parse hostname.\n"
            f"Expected a URL such as https://gerrit.example.com with a gitcookies line like:\n"
            f"{example_record('gerrit.example.com')}",
            host=server_url,
        )

    if not gitcookies_path.exists():
        raise ConfigurationError(
            f"gitcookies file not found at {gitcookies_path}.\n"
            f"Please ensure it exists and is configured for your Gerrit server.\n"
            f"Example line for {host}:\n"
            f"{example_record(host)}",
            host=host,
        )

    try:
        text = gitcookies_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(
            f"Could not read gitcookies file {gitcookies_path}: {exc}\n"
            f"It must be a readable UTF-8 text file with lines such as:\n"
            f"{example_record(host)}",
            host=host,
        ) from exc

    credential = select_credential(parse_gitcookies(text), host)
    if credential is None:
        raise ConfigurationError(
            f"Credentials for {host} (from {server_url}) not found in {gitcookies_path} "
            f"with cookie name '{GITCOOKIES_COOKIE_NAME}'.\n"
            f"Ensure a line exists like: {example_record(host)}",
            host=host,
        )

    logger.debug(f"Resolved Gerrit credentials for {credential.username} on {host}")
    return credential
