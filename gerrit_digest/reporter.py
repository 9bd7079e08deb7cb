"""Markdown rendering of merged Gerrit changes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from pathlib import Path
from typing import List, Optional, Sequence

from .constants import LOCAL_TIMESTAMP_FORMAT, REPORT_MESSAGES, TIMESTAMP_FORMAT
from .exceptions import CommitMessageUnavailable
from .models import Change, sort_by_submitted

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Reporter:
    """Turn a change set into a Markdown digest."""

    server_url: str
    days: int
    tz: Optional[tzinfo] = None  # None renders submitted times in the local timezone

    def _format_submitted(self, change: Change) -> str:
        return change.submitted.astimezone(self.tz).strftime(LOCAL_TIMESTAMP_FORMAT).strip()

    def _build_header(self, generated_at: datetime) -> List[str]:
        return [
            REPORT_MESSAGES['title'].format(days=self.days),
            "",
            REPORT_MESSAGES['generated_on'].format(timestamp=generated_at.strftime(TIMESTAMP_FORMAT)),
            "",
            REPORT_MESSAGES['intro'].format(days=self.days),
            "",
        ]

    def _build_change_section(self, change: Change) -> List[str]:
        lines = [
            "---",
            f"### {change.subject}",
            f"* **Project:** `{change.project}`",
            f"* **Branch:** `{change.branch}`",
            f"* **Change-Id:** `{change.change_id}`",
            f"* **Submitted:** `{self._format_submitted(change)}`",
            f"* **Gerrit Link:** <{change.web_url(self.server_url)}>",
        ]

        try:
            message = change.require_commit_message()
        except CommitMessageUnavailable as exc:
            logger.warning(str(exc))
            lines.append(REPORT_MESSAGES['missing_message'])
        else:
            lines.extend(["```", message.rstrip("\n"), "```"])

        lines.append("")
        return lines

    def render(self, changes: Sequence[Change], generated_at: datetime) -> str:
        """Render the digest.

        Args:
            changes: Changes in any order; they are sorted newest first.
            generated_at: Timestamp printed in the header.

        Returns:
            Markdown text ending with a newline.
        """
        lines = self._build_header(generated_at)

        if not changes:
            lines.append(REPORT_MESSAGES['no_results'])
        else:
            for change in sort_by_submitted(list(changes)):
                lines.extend(self._build_change_section(change))

        return "\n".join(lines) + "\n"

    def write(self, content: str, path: Path) -> Path:
        """Write rendered content to ``path``, replacing any existing file."""
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise OSError(f"Failed to write report to {path}: {e}") from e
        return path
