"""Custom exceptions for the Gerrit digest toolkit."""

from __future__ import annotations


class GerritDigestError(Exception):
    """Base exception for all Gerrit digest errors."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(GerritDigestError):
    """Raised when there's a configuration or credential problem."""

    def __init__(self, message: str, host: str | None = None):
        """Initialize configuration error.

        Args:
            message: Error message
            host: Gerrit host the configuration was resolved for, if known
        """
        super().__init__(message)
        self.host = host


# =============================================================================
# Transport Errors
# =============================================================================


class ApiError(GerritDigestError):
    """Raised when a Gerrit API request fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        url: str | None = None,
    ):
        """Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code if available
            body: Response body text if available
            url: Request URL that failed
        """
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.url = url


# =============================================================================
# Data Shape Errors
# =============================================================================


class CommitMessageUnavailable(GerritDigestError):
    """Raised when a change carries no resolvable commit message."""

    def __init__(self, change_id: str, subject: str):
        super().__init__(
            f"Could not retrieve full commit message for Change-Id: {change_id} "
            f'(Subject: "{subject}")'
        )
        self.change_id = change_id
        self.subject = subject
