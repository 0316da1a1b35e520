"""Tests for default header decoration."""

from __future__ import annotations

import httpx

from ResilientHTTP.network.headers import decorate_request, default_headers
from ResilientHTTP.network.policy import DEFAULT_ACCEPT, DEFAULT_USER_AGENT

DEFAULTS = default_headers()


def test_default_headers_identify_client():
    assert DEFAULTS == {"Accept": "application/json", "User-Agent": DEFAULT_USER_AGENT}
    assert DEFAULT_USER_AGENT.startswith("ResilientHTTP/")


def test_missing_accept_is_set_to_json():
    request = httpx.Request("GET", "https://example.org/")
    decorated = decorate_request(request, DEFAULTS)

    assert decorated.headers["Accept"] == DEFAULT_ACCEPT
    assert decorated.headers["User-Agent"] == DEFAULT_USER_AGENT


def test_caller_accept_wins_case_insensitively():
    request = httpx.Request("GET", "https://example.org/", headers={"accept": "text/plain"})
    decorated = decorate_request(request, DEFAULTS)

    assert decorated.headers.get_list("Accept") == ["text/plain"]
    assert decorated.headers["User-Agent"] == DEFAULT_USER_AGENT


def test_caller_request_is_not_mutated():
    request = httpx.Request("GET", "https://example.org/", headers={"X-Trace": "1"})
    before = list(request.headers.raw)

    decorated = decorate_request(request, DEFAULTS)

    assert decorated is not request
    assert list(request.headers.raw) == before
    assert "Accept" not in request.headers
    assert decorated.headers["X-Trace"] == "1"


def test_method_url_body_and_extensions_preserved():
    request = httpx.Request(
        "POST",
        "https://example.org/items?q=1",
        content=b'{"a": 1}',
        extensions={"timeout": {"read": 1.0}},
    )
    decorated = decorate_request(request, DEFAULTS)

    assert decorated.method == "POST"
    assert decorated.url == request.url
    assert decorated.content == b'{"a": 1}'
    assert decorated.extensions["timeout"] == {"read": 1.0}


def test_streaming_body_is_passed_through():
    async def body():
        yield b"chunk"

    request = httpx.Request("PUT", "https://example.org/upload", content=body())
    decorated = decorate_request(request, DEFAULTS)

    assert decorated.stream is request.stream
    assert decorated.headers["Accept"] == DEFAULT_ACCEPT
