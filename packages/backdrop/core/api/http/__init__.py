"""HTTPX wrapper shared by the registry, managed-asset and generation clients.

- AsyncApiClient: one instance per backing service
- HttpClientConfig / RetryPolicy: per-service connection and retry settings
- ApiError and subclasses: failures surfaced by every client
- BearerTokenAuth / ClientCredentialsTokenProvider: OAuth client credentials
"""

from backdrop.core.api.http.auth import (
    BearerTokenAuth,
    ClientCredentialsTokenProvider,
    TokenProvider,
)
from backdrop.core.api.http.client import AsyncApiClient
from backdrop.core.api.http.config import HttpClientConfig
from backdrop.core.api.http.errors import (
    ApiError,
    AuthError,
    ClientError,
    DecodeError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
    TokenAcquisitionError,
)
from backdrop.core.api.http.retry import RetryPolicy

__all__ = [
    "AsyncApiClient",
    "HttpClientConfig",
    "RetryPolicy",
    "BearerTokenAuth",
    "ClientCredentialsTokenProvider",
    "TokenProvider",
    "ApiError",
    "NetworkError",
    "RequestTimeoutError",
    "DecodeError",
    "RateLimitError",
    "AuthError",
    "ClientError",
    "ServerError",
    "TokenAcquisitionError",
]
