"""Applying HTTP results to the status of a resource."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, runtime_checkable

from httpreqkit.messages import HttpRequest, HttpResponse

__all__ = [
    "ResponseSetter",
    "CacheSetter",
    "SyncedSetter",
    "ErrorSetter",
    "FailureResetter",
    "LastReconcileTimeSetter",
    "RequestDetailsSetter",
    "RequestResource",
    "set_request_resource_status",
]

StatusFunc = Callable[[], None]


@runtime_checkable
class ResponseSetter(Protocol):
    """A resource that records the status code, headers and body of a response."""

    def set_status_code(self, status_code: int) -> None: ...

    def set_headers(self, headers: dict[str, list[str]]) -> None: ...

    def set_body(self, body: str) -> None: ...


@runtime_checkable
class CacheSetter(Protocol):
    """A resource that caches the last response."""

    def set_cache(self, status_code: int, headers: dict[str, list[str]] | None, body: str) -> None: ...


@runtime_checkable
class SyncedSetter(Protocol):
    """A resource with a synced flag."""

    def set_synced(self, synced: bool) -> None: ...


@runtime_checkable
class ErrorSetter(Protocol):
    """A resource that records an error."""

    def set_error(self, err: Exception | None) -> None: ...


@runtime_checkable
class FailureResetter(Protocol):
    """A resource whose failure count can be reset."""

    def reset_failures(self) -> None: ...


@runtime_checkable
class LastReconcileTimeSetter(Protocol):
    """A resource that records when it was last reconciled."""

    def set_last_reconcile_time(self) -> None: ...


@runtime_checkable
class RequestDetailsSetter(Protocol):
    """A resource that records the request that was sent."""

    def set_request_details(
        self, url: str, method: str, body: str, headers: dict[str, list[str]] | None
    ) -> None: ...


@dataclass
class RequestResource:
    """A resource together with the HTTP exchange whose results it should record.

    ``client`` must provide ``update_status(resource)``.
    """

    resource: Any
    client: Any
    http_response: HttpResponse = field(default_factory=HttpResponse)
    http_request: HttpRequest = field(default_factory=HttpRequest)

    def set_status_code(self) -> StatusFunc:
        def apply() -> None:
            if isinstance(self.resource, ResponseSetter) and self.http_response.status_code != 0:
                self.resource.set_status_code(self.http_response.status_code)
        return apply

    def set_headers(self) -> StatusFunc:
        def apply() -> None:
            if isinstance(self.resource, ResponseSetter) and self.http_response.headers is not None:
                self.resource.set_headers(self.http_response.headers)
        return apply

    def set_body(self) -> StatusFunc:
        def apply() -> None:
            if isinstance(self.resource, ResponseSetter) and self.http_response.body:
                self.resource.set_body(self.http_response.body)
        return apply

    def set_request_details(self) -> StatusFunc:
        def apply() -> None:
            request = self.http_request
            if isinstance(self.resource, RequestDetailsSetter) and request.method:
                self.resource.set_request_details(
                    request.url, request.method, request.body, request.headers
                )
        return apply

    def set_synced(self) -> StatusFunc:
        def apply() -> None:
            if isinstance(self.resource, SyncedSetter):
                self.resource.set_synced(True)
        return apply

    def set_last_reconcile_time(self) -> StatusFunc:
        def apply() -> None:
            if isinstance(self.resource, LastReconcileTimeSetter):
                self.resource.set_last_reconcile_time()
        return apply

    def set_cache(self) -> StatusFunc:
        def apply() -> None:
            if isinstance(self.resource, CacheSetter):
                response = self.http_response
                self.resource.set_cache(response.status_code, response.headers, response.body)
        return apply

    def set_error(self, err: Exception | None) -> StatusFunc:
        def apply() -> None:
            if isinstance(self.resource, ErrorSetter):
                self.resource.set_error(err)
        return apply

    def reset_failures(self) -> StatusFunc:
        def apply() -> None:
            if isinstance(self.resource, FailureResetter):
                self.resource.reset_failures()
        return apply


def set_request_resource_status(rr: RequestResource, *args: StatusFunc) -> None:
    """Apply each status function in order, then save the resource's status."""
    for update in args:
        update()
    rr.client.update_status(rr.resource)