"""Tests for change models and ordering."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from conftest import change_payload
from gerrit_digest.exceptions import CommitMessageUnavailable
from gerrit_digest.models import Change, parse_gerrit_timestamp, sort_by_submitted


@pytest.mark.parametrize(
    "value",
    [
        "2024-01-02 10:00:00.000000000",
        "2024-01-02 10:00:00",
        "2024-01-02T10:00:00Z",
        "2024-01-02T11:00:00+01:00",
    ],
)
def test_parse_gerrit_timestamp(value):
    assert parse_gerrit_timestamp(value) == datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)


def test_parse_gerrit_timestamp_rejects_garbage():
    with pytest.raises(ValueError):
        parse_gerrit_timestamp("yesterday")


def test_change_from_dict_resolves_current_commit_message():
    change = Change.from_dict(change_payload(1, message="Fix bug\n\nDetails."))

    assert change.change_id == "I" + "1".zfill(40)
    assert change.status == "MERGED"
    assert change.commit_message == "Fix bug\n\nDetails."
    assert change.require_commit_message() == "Fix bug\n\nDetails."


def test_missing_revision_detail_has_no_message():
    payload = change_payload(1, message=None)
    change = Change.from_dict(payload)

    assert change.commit_message is None
    with pytest.raises(CommitMessageUnavailable) as excinfo:
        change.require_commit_message()
    assert excinfo.value.change_id == payload["change_id"]
    assert excinfo.value.subject == "Change 1"


def test_unknown_current_revision_has_no_message():
    payload = change_payload(1)
    payload["current_revision"] = "deadbeef"

    assert Change.from_dict(payload).commit_message is None


def test_change_without_revisions_or_current_revision():
    payload = change_payload(1)
    del payload["revisions"]
    del payload["current_revision"]

    change = Change.from_dict(payload)

    assert change.revisions == {}
    assert change.commit_message is None


def test_web_url():
    change = Change.from_dict(change_payload(1))

    assert change.web_url("https://gerrit.example.com/") == (
        f"https://gerrit.example.com/c/proj/+/{change.change_id}"
    )


def test_sort_by_submitted_is_descending_and_stable():
    changes = [
        Change.from_dict(change_payload(1, submitted="2024-01-01 00:00:00.000000000")),
        Change.from_dict(change_payload(2, submitted="2024-03-01 00:00:00.000000000")),
        Change.from_dict(change_payload(3, submitted="2024-01-01 00:00:00.000000000")),
        Change.from_dict(change_payload(4, submitted="2024-02-01 00:00:00.000000000")),
    ]

    ordered = sort_by_submitted(changes)

    assert [c.subject for c in ordered] == ["Change 2", "Change 4", "Change 1", "Change 3"]
    assert [c.subject for c in changes] == ["Change 1", "Change 2", "Change 3", "Change 4"]
