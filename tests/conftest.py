"""Shared fixtures for the Gerrit digest tests."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest

from gerrit_digest.config import Config
from gerrit_digest.gitcookies import Credential

SERVER_URL = "https://gerrit.example.com"


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", reason: str = "OK") -> None:
        self.status_code = status_code
        self.text = text
        self.reason = reason
        self.headers: Dict[str, str] = {"content-type": "application/json"}

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


class FakeSession:
    """Minimal stand-in for requests.Session that replays queued responses."""

    def __init__(self, responses: List[FakeResponse]) -> None:
        self.responses = list(responses)
        self.headers: Dict[str, str] = {}
        self.requests: List[Dict[str, Any]] = []
        self.closed = False

    def get(self, url: str, timeout: Optional[int] = None) -> FakeResponse:
        self.requests.append({"url": url, "timeout": timeout, "headers": dict(self.headers)})
        if not self.responses:
            raise AssertionError(f"Unexpected request {url}")
        return self.responses.pop(0)

    def close(self) -> None:
        self.closed = True


def gerrit_body(payload: Any) -> str:
    return ")]}'\n" + json.dumps(payload)


def change_payload(
    number: int,
    submitted: str = "2024-01-02 10:00:00.000000000",
    message: Optional[str] = "Subject\n\nBody.\n",
) -> Dict[str, Any]:
    sha = f"{number:040x}"
    revision: Dict[str, Any] = {"commit": {"message": message}} if message is not None else {}
    return {
        "id": f"proj~main~I{number:040d}",
        "project": "proj",
        "branch": "main",
        "change_id": f"I{number:040d}",
        "subject": f"Change {number}",
        "status": "MERGED",
        "submitted": submitted,
        "current_revision": sha,
        "revisions": {sha: revision},
    }


@pytest.fixture
def config() -> Config:
    return Config().with_overrides(
        server__url=SERVER_URL,
        query__owner="dev@example.com",
        query__page_size=2,
        query__days_to_look_back=30,
    )


@pytest.fixture
def credential() -> Credential:
    return Credential(host="gerrit.example.com", username="git-dev.example.com", token="s3cret")
