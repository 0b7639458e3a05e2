"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Error hierarchy for the dashboard fetch layer.
"""

from __future__ import annotations


class DashboardConfigurationError(RuntimeError):
    """Raised when settings or page parameters are invalid."""


class FetchError(RuntimeError):
    """
    Base error for one failed API fetch.

    Attributes:
        path: API path (relative to the API prefix) that was requested.
        status: HTTP status code when the server was reachable.
        body: Truncated response body kept for diagnostics.
    """

    kind = "fetch"

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        status: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.path = path
        self.status = status
        self.body = body


class HttpError(FetchError):
    """Raised when the server answered with a non-2xx status."""

    kind = "http"

    def __init__(self, path: str, status: int, body: str = "") -> None:
        super().__init__(
            f"API {path} failed ({status})",
            path=path,
            status=status,
            body=body,
        )

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class MalformedResponseError(FetchError):
    """Raised when a 2xx response is not a JSON document."""

    kind = "malformed"

    def __init__(self, path: str, status: int, body: str = "") -> None:
        super().__init__(
            f"Non-JSON response from {path}",
            path=path,
            status=status,
            body=body,
        )


class NetworkFailureError(FetchError):
    """Raised when the request could not complete at all."""

    kind = "network"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"API {path} could not complete: {reason}", path=path)
        self.reason = reason


def is_not_found(error: BaseException) -> bool:
    """Return True only for HTTP 404 failures."""
    return isinstance(error, HttpError) and error.is_not_found
