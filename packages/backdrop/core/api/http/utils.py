"""URL helpers for service clients."""

from __future__ import annotations

from urllib.parse import urljoin


def join_url(base_url: str, path: str) -> str:
    """Resolve ``path`` against a service base URL.

    Absolute http(s) URLs (generated images, token endpoints) pass through
    unchanged so one client can follow links to other hosts.

    Examples:
        >>> join_url("https://crm.example.com/api", "/scene-assets")
        'https://crm.example.com/api/scene-assets'
        >>> join_url("https://crm.example.com/api", "https://cdn.example.com/a.jpg")
        'https://cdn.example.com/a.jpg'
    """
    if path.startswith(("http://", "https://")):
        return path
    return urljoin(base_url.rstrip("/") + "/", path.lstrip("/"))
