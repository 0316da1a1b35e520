"""Request decoration: default headers applied without overriding the caller.

Decoration is copy-on-write. The caller's :class:`httpx.Request` is never
mutated; a new request carrying the merged headers is returned instead.
Header names are compared case-insensitively (``accept`` blocks ``Accept``).
"""

from __future__ import annotations

from collections.abc import Mapping

import httpx

from ResilientHTTP.network.policy import DEFAULT_ACCEPT, DEFAULT_USER_AGENT


def default_headers(
    user_agent: str = DEFAULT_USER_AGENT,
    accept: str = DEFAULT_ACCEPT,
) -> dict[str, str]:
    """Return the default header set identifying this client."""
    return {"Accept": accept, "User-Agent": user_agent}


def decorate_request(request: httpx.Request, defaults: Mapping[str, str]) -> httpx.Request:
    """Return a copy of ``request`` with ``defaults`` filled in for absent headers.

    Args:
        request: Caller-supplied request. Left untouched.
        defaults: Header name to value mapping applied only where the request
            does not already carry that header.

    Returns:
        A new :class:`httpx.Request` with identical method, URL, body, and
        extensions.

    Example:
        >>> req = httpx.Request("GET", "https://example.org", headers={"Accept": "text/plain"})
        >>> decorate_request(req, {"Accept": "application/json"}).headers["Accept"]
        'text/plain'
    """
    headers = httpx.Headers(request.headers)
    for name, value in defaults.items():
        if name not in headers:
            headers[name] = value

    try:
        content = request.content
    except httpx.RequestNotRead:
        # Streaming body; hand the same stream to the copy.
        return httpx.Request(
            request.method,
            request.url,
            headers=headers,
            stream=request.stream,
            extensions=dict(request.extensions),
        )

    return httpx.Request(
        request.method,
        request.url,
        headers=headers,
        content=content,
        extensions=dict(request.extensions),
    )


__all__ = ["default_headers", "decorate_request"]
