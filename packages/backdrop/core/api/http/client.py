"""Async HTTP client shared by every backdrop service integration.

One AsyncApiClient exists per backing service (scene registry, managed
assets, generation, token endpoints, static asset host). It converts
non-2xx responses and transport failures into the ApiError hierarchy,
retries lookups according to the service's RetryPolicy and logs each
attempt with sensitive headers masked.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Mapping
from typing import Any

import httpx

from backdrop.core.api.http.config import HttpClientConfig
from backdrop.core.api.http.errors import (
    ApiError,
    DecodeError,
    NetworkError,
    RequestTimeoutError,
)
from backdrop.core.api.http.retry import RetryPolicy
from backdrop.core.api.http.utils import join_url

logger = logging.getLogger("backdrop.core.api.http")

REDACTED = "***"


class AsyncApiClient:
    """Client for one backing service.

    Args:
        config: Base URL, timeouts and default headers for the service
        auth: Optional httpx auth (BearerTokenAuth for CRM and generation)
        retry_policy: Defaults to ``RetryPolicy.for_lookups()``
        transport: Optional transport (tests pass ``httpx.MockTransport``)

    Example:
        >>> config = HttpClientConfig(base_url="https://crm.example.com/api")
        >>> async with AsyncApiClient(config) as client:
        ...     resp = await client.get("/scene-assets", params={"setting": "travel"})
        ...     records = client.json(resp)
    """

    def __init__(
        self,
        config: HttpClientConfig,
        *,
        auth: httpx.Auth | None = None,
        retry_policy: RetryPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy.for_lookups()
        self._http = httpx.AsyncClient(
            headers={"User-Agent": config.user_agent, **config.headers},
            timeout=config.timeout,
            limits=config.limits,
            follow_redirects=config.follow_redirects,
            auth=auth,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> AsyncApiClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        data: Any = None,
    ) -> httpx.Response:
        """Send a request and return the 2xx response.

        ``path`` is joined to the service base URL unless it is already an
        absolute http(s) URL. ``None`` values in ``params`` are dropped.

        Raises:
            ApiError: Subclass matching the final failure
        """
        method = method.upper()
        url = join_url(self.config.base_url, path)
        query = {k: str(v) for k, v in (params or {}).items() if v is not None} or None
        request_id = f"bd-{uuid.uuid4().hex[:12]}"

        attempt = 0
        while True:
            attempt += 1
            try:
                return await self._send(
                    method, url, attempt, request_id, params=query, json=json_body, data=data
                )
            except ApiError as e:
                if not self.retry_policy.should_retry(method, attempt, e.status_code):
                    raise
                delay = self.retry_policy.delay_s(attempt, e.retry_after_s)
                logger.debug("Retrying %s %s in %.2fs after: %s", method, url, delay, e)
                await asyncio.sleep(delay)

    async def _send(
        self, method: str, url: str, attempt: int, request_id: str, **kwargs: Any
    ) -> httpx.Response:
        headers = {"X-Request-Id": request_id}
        started = time.perf_counter()
        try:
            resp = await self._http.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(
                "Request timed out", method=method, url=url, request_id=request_id, cause=e
            ) from e
        except httpx.RequestError as e:
            raise NetworkError(
                f"Transport failure: {e}", method=method, url=url, request_id=request_id, cause=e
            ) from e

        logger.debug(
            "%s %s -> %d",
            method,
            url,
            resp.status_code,
            extra={
                "attempt": attempt,
                "request_id": request_id,
                "elapsed_ms": int((time.perf_counter() - started) * 1000),
                "headers": self._redacted(resp.request.headers),
            },
        )
        if resp.is_success:
            return resp
        raise ApiError.from_response(resp, "Service returned an error status")

    def _redacted(self, headers: Mapping[str, str]) -> dict[str, str]:
        masked = {name.lower() for name in self.config.redact_headers}
        return {k: REDACTED if k.lower() in masked else v for k, v in headers.items()}

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def head(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("HEAD", path, **kwargs)

    def json(self, response: httpx.Response) -> Any:
        """Decode a JSON body; empty and 204 responses decode to None.

        Raises:
            DecodeError: Content type is not JSON or the body does not parse
        """
        if response.status_code == 204 or not response.content:
            return None
        content_type = response.headers.get("content-type", "")
        problem = None
        if "json" not in content_type:
            problem = f"Expected JSON, got {content_type or 'no content type'}"
        else:
            try:
                return response.json()
            except ValueError as e:
                problem = f"Malformed JSON: {e}"
        raise DecodeError(
            problem,
            method=response.request.method,
            url=str(response.request.url),
            status_code=response.status_code,
            request_id=response.request.headers.get("X-Request-Id"),
        )
