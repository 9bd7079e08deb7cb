"""Gerrit API, credential, and report constants."""

from __future__ import annotations

# =============================================================================
# Gerrit REST API
# =============================================================================

# Gerrit prefixes JSON bodies with this marker to defeat XSSI
XSSI_PREFIX = ")]}'"

# Query options that inline the current revision's commit detail
CHANGE_QUERY_OPTIONS = ("CURRENT_COMMIT", "CURRENT_REVISION")

API_DEFAULTS = {
    'page_size': 500,
    'timeout': 30,
}

# =============================================================================
# Credentials
# =============================================================================

GITCOOKIES_FILENAME = ".gitcookies"
GITCOOKIES_FIELD_COUNT = 7
GITCOOKIES_COOKIE_NAME = "o"

# =============================================================================
# Defaults and Report Text
# =============================================================================

DEFAULT_SERVER_URL = "https://fuchsia-review.googlesource.com"
DEFAULT_OUTPUT_FILENAME = "gerrit_commit_messages.md"
DEFAULT_DAYS_TO_LOOK_BACK = 180

REPORT_MESSAGES = {
    'title': "# Merged Gerrit CL Commit Messages (Last {days} Days)",
    'generated_on': "*Generated on: {timestamp}*",
    'intro': (
        "This document lists the commit messages (CL summary descriptions) from merged "
        "Gerrit Code Reviews submitted in the last {days} days."
    ),
    'no_results': "No merged changes found for the specified period.",
    'missing_message': "_Commit message could not be retrieved._",
}

DATE_FORMAT = "%Y-%m-%d"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
LOCAL_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %Z"
