"""HTTP request and response records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

__all__ = ["HttpResponse", "HttpRequest"]


@dataclass
class HttpResponse:
    """A received HTTP response."""

    status_code: int = 0
    headers: dict[str, list[str]] | None = None
    body: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the response as a JSON-shaped dict."""
        headers = None
        if self.headers is not None:
            headers = {name: list(values) for name, values in self.headers.items()}
        return {"statusCode": self.status_code, "headers": headers, "body": self.body}


@dataclass
class HttpRequest:
    """An HTTP request as it was sent."""

    method: str = ""
    url: str = ""
    body: str = ""
    headers: dict[str, list[str]] | None = None