"""Validation of HTTP requests and status codes."""

from __future__ import annotations

from urllib.parse import urlsplit

__all__ = [
    "InvalidRequestError",
    "is_request_valid",
    "is_http_success",
    "is_http_error",
    "is_url_valid",
]


class InvalidRequestError(ValueError):
    """Raised when a request lacks a method or has an invalid URL."""


def is_request_valid(method: str, url: str) -> None:
    """Raise :class:`InvalidRequestError` unless ``method`` and ``url`` are usable."""
    if not method:
        raise InvalidRequestError("no method is specified")
    if not is_url_valid(url):
        raise InvalidRequestError(f"invalid url {url}")


def is_http_success(status_code: int) -> bool:
    """Return True for 2xx status codes."""
    return 200 <= status_code < 300


def is_http_error(status_code: int) -> bool:
    """Return True for 4xx and 5xx status codes."""
    return 400 <= status_code < 600


def is_url_valid(url: str) -> bool:
    """Return True if ``url`` is absolute with both a scheme and a host."""
    if not url or any(ch.isspace() for ch in url):
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc)