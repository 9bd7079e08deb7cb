"""Gerrit REST API client."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import requests

from .config import Config
from .constants import CHANGE_QUERY_OPTIONS, XSSI_PREFIX
from .exceptions import ApiError
from .gitcookies import Credential

logger = logging.getLogger(__name__)


def basic_auth_header(credential: Credential) -> str:
    """Build the HTTP Basic ``Authorization`` value for a credential."""
    raw = f"{credential.username}:{credential.token}".encode("utf-8")
    return f"Basic {base64.b64encode(raw).decode('ascii')}"


def strip_xssi_prefix(text: str) -> str:
    """Remove Gerrit's ``)]}'`` marker line from a JSON body."""
    if text.startswith(XSSI_PREFIX):
        return text[len(XSSI_PREFIX):].lstrip("\r\n")
    return text


def has_more_pages(page: List[Any], page_size: int) -> bool:
    """Whether another page may follow.

    Gerrit offers no cursor on ``/changes/``; a full page means "maybe more",
    a short page (including an empty one) means the results are exhausted.
    """
    return len(page) == page_size


def build_changes_query(owner: str, after_date: str) -> str:
    """Gerrit search expression with literal ``+`` between percent-encoded terms."""
    return f"status:merged+after:{quote(after_date, safe='')}+owner:{quote(owner, safe='@.')}"


class GerritApiClient:
    """Thin wrapper around the authenticated Gerrit ``/a/`` REST endpoints.

    This class handles:
    - HTTP Basic authentication
    - XSSI prefix stripping and JSON decoding
    - Offset pagination of change queries
    """

    def __init__(
        self,
        config: Config,
        credential: Credential,
        session: Optional[requests.Session] = None,
    ):
        """Initialize Gerrit API client.

        Args:
            config: Configuration with the server URL, page size and timeout
            credential: Credential resolved for the configured host
            session: Optional requests session, created lazily when omitted
        """
        self.config = config
        self.session = session
        self._headers: Dict[str, str] = {
            "Authorization": basic_auth_header(credential),
            "Accept": "application/json",
        }

    def _get_session(self) -> requests.Session:
        if self.session is None:
            self.session = requests.Session()
            logger.debug("Initialized requests session")
        self.session.headers.update(self._headers)
        return self.session

    def _build_api_url(self, path: str) -> str:
        """Build the authenticated API URL for ``path``.

        Raises:
            ValueError: If path is empty
        """
        if not path or not path.strip():
            raise ValueError("API path cannot be empty")

        base = self.config.server.url.rstrip("/")
        return f"{base}/a/{path.lstrip('/')}"

    def request_list(self, path: str, query: str) -> List[Dict[str, Any]]:
        """GET ``path`` with a pre-encoded query string and return the JSON list.

        The query string is appended verbatim because Gerrit search expressions
        use literal ``+`` as the term separator.

        Raises:
            ApiError: On network failure, non-success status, or a body that is
                not a JSON list.
        """
        url = f"{self._build_api_url(path)}?{query}"
        logger.debug(f"Requesting {url}")

        try:
            response = self._get_session().get(url, timeout=self.config.api.timeout)
        except requests.RequestException as exc:
            raise ApiError(f"Network error for {url}: {exc}", url=url) from exc

        if not response.ok:
            raise ApiError(
                f"Gerrit API error: {response.status_code} - {response.reason}\n"
                f"Response body: {response.text}",
                status_code=response.status_code,
                body=response.text,
                url=url,
            )

        try:
            payload = json.loads(strip_xssi_prefix(response.text))
        except json.JSONDecodeError as exc:
            logger.error(
                f"Failed to decode JSON from {url}. "
                f"Status: {response.status_code}, "
                f"Content-Type: {response.headers.get('content-type', 'unknown')}, "
                f"Content preview: {response.text[:200]}"
            )
            raise ApiError(
                f"Invalid JSON response from {url}: {exc}",
                status_code=response.status_code,
                body=response.text,
                url=url,
            ) from exc

        if not isinstance(payload, list):
            raise ApiError(
                f"Expected list response from {url}, got {type(payload).__name__}",
                status_code=response.status_code,
                body=response.text,
                url=url,
            )

        return payload

    def fetch_merged_changes(
        self,
        owner: str,
        after_date: str,
        progress: Optional[Callable[[int, int], None]] = None,
    ) -> List[Dict[str, Any]]:
        """Retrieve every merged change by ``owner`` submitted after ``after_date``.

        Args:
            owner: Gerrit account identifier (usually an email address)
            after_date: Lower bound in ``YYYY-MM-DD`` form
            progress: Optional callback receiving (page length, running total)

        Returns:
            Raw ChangeInfo entities across all pages, in server order.

        Raises:
            ApiError: If any page fails; earlier pages are discarded.
        """
        page_size = self.config.query.page_size
        options = "".join(f"&o={option}" for option in CHANGE_QUERY_OPTIONS)
        q = build_changes_query(owner, after_date)

        results: List[Dict[str, Any]] = []
        start = 0

        logger.info(f"Fetching merged changes submitted after {after_date} for {owner}")

        while True:
            page = self.request_list("changes/", f"q={q}{options}&S={start}&n={page_size}")
            results.extend(page)
            start += len(page)
            if progress:
                progress(len(page), len(results))

            if not has_more_pages(page, page_size):
                logger.info(f"Fetched {len(page)} changes (total {len(results)}). Reached end of results.")
                break

            logger.info(f"Fetched {len(page)} changes (total {len(results)}). Continuing to fetch more...")

        return results

    def close(self) -> None:
        """Close the requests session and release resources."""
        if self.session is not None:
            self.session.close()
            self.session = None

    def __enter__(self) -> "GerritApiClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
