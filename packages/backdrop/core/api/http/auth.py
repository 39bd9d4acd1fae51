from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncGenerator, Callable, Generator
from typing import TYPE_CHECKING, Protocol

import httpx

from backdrop.core.api.http.errors import ApiError, AuthError, TokenAcquisitionError

if TYPE_CHECKING:
    from backdrop.core.api.http.client import AsyncApiClient

logger = logging.getLogger(__name__)

# Tokens are treated as expired this many seconds before the server says so.
EARLY_EXPIRY_S = 300.0
# Lifetime assumed when the token response omits expires_in.
DEFAULT_TOKEN_LIFETIME_S = 86400.0


class TokenProvider(Protocol):
    """Protocol for providing and refreshing bearer tokens.

    The HTTP client only depends on this narrow interface. Both methods are
    coroutines since every implementation here talks to a token endpoint.
    """

    async def get_token(self) -> str:
        """Get current token.

        Returns:
            Valid bearer token

        Raises:
            ApiError: If the token cannot be retrieved
        """
        ...

    async def refresh_token(self) -> str:
        """Discard any cached token and fetch a new one.

        Returns:
            New valid bearer token

        Raises:
            ApiError: If the token cannot be refreshed
        """
        ...


class ClientCredentialsTokenProvider:
    """OAuth2 client-credentials token provider with an in-memory cache.

    Tokens are form-POSTed for at the token URL and reused until
    ``expires_in - 300`` seconds have passed. When the response carries no
    ``expires_in`` a 24 hour lifetime is assumed. Concurrent callers share
    a single in-flight fetch.

    Args:
        client: HTTP client used for the token endpoint (must not itself
            carry BearerTokenAuth)
        token_url: Absolute token endpoint URL
        client_id: OAuth client id
        client_secret: OAuth client secret
        scope: Optional space/comma separated scope string
        clock: Monotonic clock in seconds (injectable for tests)
    """

    def __init__(
        self,
        client: AsyncApiClient,
        *,
        token_url: str,
        client_id: str,
        client_secret: str,
        scope: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._token_url = token_url
        self._client_id = client_id
        self._client_secret = client_secret
        self._scope = scope
        self._clock = clock
        self._token: str | None = None
        self._expires_at: float = 0.0
        self._lock = asyncio.Lock()

    async def get_token(self) -> str:
        async with self._lock:
            if self._token is not None and self._clock() < self._expires_at:
                return self._token
            return await self._fetch()

    async def refresh_token(self) -> str:
        async with self._lock:
            self._token = None
            self._expires_at = 0.0
            return await self._fetch()

    async def _fetch(self) -> str:
        form = {
            "grant_type": "client_credentials",
            "client_id": self._client_id,
            "client_secret": self._client_secret,
        }
        if self._scope:
            form["scope"] = self._scope

        try:
            resp = await self._client.post(self._token_url, data=form)
            payload = self._client.json(resp)
        except ApiError as e:
            raise TokenAcquisitionError(
                f"Token request failed: {e.message}",
                method="POST",
                url=self._token_url,
                status_code=e.status_code,
                request_id=e.request_id,
                body=e.body,
                cause=e,
            ) from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise TokenAcquisitionError(
                "Token response missing access_token",
                method="POST",
                url=self._token_url,
                status_code=resp.status_code,
            )

        lifetime = payload.get("expires_in")
        try:
            lifetime_s = float(lifetime) if lifetime is not None else DEFAULT_TOKEN_LIFETIME_S
        except (TypeError, ValueError):
            lifetime_s = DEFAULT_TOKEN_LIFETIME_S

        self._token = str(token)
        self._expires_at = self._clock() + max(0.0, lifetime_s - EARLY_EXPIRY_S)
        logger.debug("Acquired access token (valid for %.0fs)", lifetime_s - EARLY_EXPIRY_S)
        return self._token


class BearerTokenAuth(httpx.Auth):
    """Bearer token authentication with automatic refresh on 401.

    Async only: the token provider is a coroutine interface.

    Args:
        provider: Token provider implementation
        header_name: Header name for the token (default: "Authorization")
    """

    requires_response_body = True

    def __init__(self, provider: TokenProvider, header_name: str = "Authorization") -> None:
        self._provider = provider
        self._header_name = header_name

    def _apply(self, request: httpx.Request, token: str) -> None:
        request.headers[self._header_name] = f"Bearer {token}"

    def sync_auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        raise AuthError(
            "BearerTokenAuth requires an async client",
            method=request.method,
            url=str(request.url),
        )

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        """Apply bearer token, refreshing and retrying once on 401."""
        token = await self._provider.get_token()
        self._apply(request, token)
        response = yield request

        if response is not None and response.status_code == 401:
            logger.info("Received 401, refreshing bearer token and retrying once")
            token = await self._provider.refresh_token()
            new_request = httpx.Request(
                method=request.method,
                url=request.url,
                headers=request.headers.copy(),
                content=request.content,
            )
            self._apply(new_request, token)
            yield new_request
