from __future__ import annotations

import httpx
from pydantic import BaseModel, Field, field_validator


class HttpClientConfig(BaseModel):
    """Connection settings for one backing service.

    Args:
        base_url: Base URL for all requests (e.g. "https://registry.example.com")
        timeout_s: Read/write timeout in seconds
        connect_timeout_s: Connect timeout in seconds
        max_connections: Connection pool size
        follow_redirects: Whether to follow HTTP redirects
        headers: Default headers applied to all requests
        user_agent: User-Agent header value
        redact_headers: Headers masked in debug logs (case-insensitive)
    """

    model_config = {"frozen": True}

    base_url: str
    timeout_s: float = Field(default=15.0, gt=0.0)
    connect_timeout_s: float = Field(default=5.0, gt=0.0)
    max_connections: int = Field(default=20, ge=1)
    follow_redirects: bool = True
    headers: dict[str, str] = Field(default_factory=dict)
    user_agent: str = "backdrop/0.1"
    redact_headers: tuple[str, ...] = (
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
        "x-api-key",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensure base_url is an absolute http(s) URL."""
        if not v:
            raise ValueError("base_url cannot be empty")
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v

    @property
    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.timeout_s, connect=self.connect_timeout_s)

    @property
    def limits(self) -> httpx.Limits:
        return httpx.Limits(
            max_keepalive_connections=self.max_connections,
            max_connections=self.max_connections,
        )
