"""Domain models for Gerrit changes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from .exceptions import CommitMessageUnavailable

# Gerrit timestamps are UTC with nanosecond precision: "2024-01-02 10:00:00.000000000"
_GERRIT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def parse_gerrit_timestamp(value: str) -> datetime:
    """Parse a Gerrit or ISO-8601 timestamp into an aware UTC datetime.

    Raises:
        ValueError: If the value matches neither format.
    """
    text = value.strip()
    if "T" in text:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    else:
        date_part, _, fraction = text.partition(".")
        # strptime only understands microseconds
        parsed = datetime.strptime(f"{date_part}.{(fraction or '0')[:6]}", _GERRIT_TIMESTAMP_FORMAT)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True, slots=True)
class Revision:
    """One patch set of a change; only the commit message is retained."""

    commit_message: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Revision":
        commit = payload.get("commit") or {}
        return cls(commit_message=commit.get("message"))


@dataclass(frozen=True, slots=True)
class Change:
    """A merged Gerrit change as returned by ``/changes/`` queries."""

    id: str
    project: str
    branch: str
    change_id: str
    subject: str
    status: str
    submitted: datetime
    current_revision: Optional[str] = None
    revisions: Dict[str, Revision] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Change":
        """Build a change from a ChangeInfo JSON entity.

        Raises:
            KeyError: If a required ChangeInfo field is missing.
            ValueError: If the submitted timestamp cannot be parsed.
        """
        revisions = {
            sha: Revision.from_dict(revision or {})
            for sha, revision in (payload.get("revisions") or {}).items()
        }
        return cls(
            id=payload.get("id", ""),
            project=payload["project"],
            branch=payload["branch"],
            change_id=payload["change_id"],
            subject=payload["subject"],
            status=payload.get("status", ""),
            submitted=parse_gerrit_timestamp(payload["submitted"]),
            current_revision=payload.get("current_revision"),
            revisions=revisions,
        )

    @property
    def commit_message(self) -> Optional[str]:
        """Commit message of the current revision, if it was returned."""
        if not self.current_revision:
            return None
        revision = self.revisions.get(self.current_revision)
        return revision.commit_message if revision else None

    def require_commit_message(self) -> str:
        """Return the current commit message.

        Raises:
            CommitMessageUnavailable: If the current revision carries no commit detail.
        """
        message = self.commit_message
        if message is None:
            raise CommitMessageUnavailable(self.change_id, self.subject)
        return message

    def web_url(self, server_url: str) -> str:
        """Permalink to the change on the Gerrit web UI."""
        return f"{server_url.rstrip('/')}/c/{self.project}/+/{self.change_id}"


def sort_by_submitted(changes: list[Change]) -> list[Change]:
    """Most recently submitted first; ties keep their original order."""
    return sorted(changes, key=lambda change: change.submitted, reverse=True)
