"""Utility helpers shared across the Gerrit digest modules."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional
from urllib.parse import urlparse

from .constants import DATE_FORMAT


def validate_url(url: str, name: str = "URL") -> None:
    """Validate URL format.

    Args:
        url: The URL to validate.
        name: Name of the URL field for error messages.

    Raises:
        ValueError: If the URL format is invalid.
    """
    if not url or not url.strip():
        raise ValueError(f"{name} cannot be empty")

    result = urlparse(url.strip())
    if not result.scheme:
        raise ValueError(f"{name} must include a scheme (http:// or https://)")
    if result.scheme not in ("http", "https"):
        raise ValueError(f"{name} must use http or https scheme")
    if not result.hostname:
        raise ValueError(f"{name} must include a hostname")


def extract_hostname(url: str) -> Optional[str]:
    """Return the lower-cased hostname of ``url`` or None when it has none."""
    try:
        return urlparse(url.strip()).hostname or None
    except ValueError:
        return None


def lookback_date(days: int, today: Optional[date] = None) -> str:
    """Return ``today - days`` formatted as ``YYYY-MM-DD``.

    Args:
        days: Size of the trailing window.
        today: Reference date, defaults to the local current date.
    """
    if days < 0:
        raise ValueError(f"days must not be negative, got {days}")
    reference = today or datetime.now().date()
    return (reference - timedelta(days=days)).strftime(DATE_FORMAT)
