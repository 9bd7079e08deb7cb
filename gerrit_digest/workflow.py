"""End-to-end digest workflow: credentials, fetch, render, write."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import requests

from .api_client import GerritApiClient
from .config import Config
from .console import Console
from .gitcookies import Credential, load_credentials
from .models import Change
from .reporter import Reporter
from .utils import lookback_date

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DigestResult:
    """Outcome of a successful run."""

    output_path: Path
    after_date: str
    change_count: int
    missing_messages: int


def resolve_credentials(config: Config, gitcookies_path: Optional[Path] = None) -> Credential:
    """Load the credential for the configured server (raises ConfigurationError)."""
    return load_credentials(config.server.url, gitcookies_path)


def collect_changes(
    config: Config,
    credential: Credential,
    after_date: str,
    console: Console,
    session: Optional[requests.Session] = None,
) -> list[Change]:
    """Fetch and model every merged change for the configured owner."""

    def report_page(page_length: int, total: int) -> None:
        console.print(f"[muted]Fetched {page_length} changes (total={total})[/]")

    with GerritApiClient(config, credential, session=session) as client:
        raw_changes = client.fetch_merged_changes(config.query.owner, after_date, progress=report_page)

    return [Change.from_dict(payload) for payload in raw_changes]


def run_digest(
    config: Config,
    credential: Credential,
    console: Console,
    now: Optional[datetime] = None,
    session: Optional[requests.Session] = None,
) -> DigestResult:
    """Fetch, render and write the digest for an already-resolved credential.

    Raises:
        ApiError: If fetching fails; nothing is written in that case.
        OSError: If the output file cannot be written.
    """
    now = now or datetime.now()
    after_date = lookback_date(config.query.days_to_look_back, today=now.date())
    console.print(f"[info]Collecting merged changes submitted after[/] [accent]{after_date}[/]")

    changes = collect_changes(config, credential, after_date, console, session=session)
    console.print(f"[info]Total merged changes fetched:[/] {len(changes)}")

    reporter = Reporter(server_url=config.server.url, days=config.query.days_to_look_back)
    content = reporter.render(changes, generated_at=now)
    output_path = reporter.write(content, Path(config.output.filename))

    missing = sum(1 for change in changes if change.commit_message is None)
    if missing:
        console.print(f"[warning]{missing} change(s) rendered without a commit message[/]")

    return DigestResult(
        output_path=output_path,
        after_date=after_date,
        change_count=len(changes),
        missing_messages=missing,
    )
