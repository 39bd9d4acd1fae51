"""Errors raised by AsyncApiClient when a backing service call fails."""

from __future__ import annotations

import httpx

# Response text kept on an error for log lines.
BODY_EXCERPT_CHARS = 512


class ApiError(Exception):
    """A registry, managed-asset, token or generation call failed.

    ``status_code`` is None when no response arrived at all. Callers that
    poll (the async-job provider) use that to tell an outage from a
    non-OK answer.
    """

    def __init__(
        self,
        message: str,
        *,
        method: str,
        url: str,
        status_code: int | None = None,
        request_id: str | None = None,
        retry_after_s: float | None = None,
        body: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.message = message
        self.method = method
        self.url = url
        self.status_code = status_code
        self.request_id = request_id
        self.retry_after_s = retry_after_s
        self.body = body
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        outcome = self.status_code if self.status_code is not None else "no response"
        text = f"{self.method} {self.url} -> {outcome}: {self.message}"
        return f"{text} [{self.request_id}]" if self.request_id else text

    @classmethod
    def from_response(cls, response: httpx.Response, message: str) -> ApiError:
        """Build the error subclass matching ``response.status_code``."""
        request = response.request
        return error_for_status(response.status_code)(
            message,
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            request_id=request.headers.get("X-Request-Id"),
            retry_after_s=_retry_after(response.headers.get("Retry-After")),
            body=response.text[:BODY_EXCERPT_CHARS] if response.content else None,
        )


class NetworkError(ApiError):
    """No response: DNS failure, refused or reset connection."""


class RequestTimeoutError(NetworkError):
    """No response within the client's timeout."""


class DecodeError(ApiError):
    """The response body was not the JSON the caller expected."""


class AuthError(ApiError):
    """401/403 from a service, or a bearer token could not be applied."""


class TokenAcquisitionError(AuthError):
    """The OAuth token endpoint failed or returned no access token."""


class RateLimitError(ApiError):
    """429 from a service."""


class ClientError(ApiError):
    """Other 4xx responses."""


class ServerError(ApiError):
    """5xx responses."""


def error_for_status(status_code: int) -> type[ApiError]:
    if status_code in (401, 403):
        return AuthError
    if status_code == 429:
        return RateLimitError
    if 400 <= status_code < 500:
        return ClientError
    if status_code >= 500:
        return ServerError
    return ApiError


def _retry_after(value: str | None) -> float | None:
    # Only the delta-seconds form is honoured.
    try:
        seconds = float(value) if value else None
    except ValueError:
        return None
    return seconds if seconds is not None and seconds >= 0 else None
