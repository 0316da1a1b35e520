"""Tests for Retry-After parsing and the rate-limit state value."""

from __future__ import annotations

from email.utils import format_datetime
from datetime import datetime, timezone

import httpx
import pytest

from ResilientHTTP.network.ratelimit import (
    DEFAULT_RATE_LIMIT_COOLDOWN,
    RateLimitState,
    parse_retry_after,
)

NOW = 1_700_000_000.0


@pytest.mark.parametrize(
    "value, expected",
    [
        ("120", 120.0),
        (" 5 ", 5.0),
        ("0", 0.0),
        ("-3", 0.0),
        (None, None),
        ("", None),
        ("soon", None),
    ],
)
def test_parse_retry_after_seconds(value, expected):
    assert parse_retry_after(value, now=NOW) == expected


def test_parse_retry_after_http_date():
    future = datetime.fromtimestamp(NOW + 90, tz=timezone.utc)
    assert parse_retry_after(format_datetime(future, usegmt=True), now=NOW) == pytest.approx(90.0)


def test_parse_retry_after_past_date_is_zero():
    past = datetime.fromtimestamp(NOW - 90, tz=timezone.utc)
    assert parse_retry_after(format_datetime(past, usegmt=True), now=NOW) == 0.0


def test_inactive_state():
    state = RateLimitState.inactive()
    assert not state.is_limited(NOW)
    assert state.seconds_remaining(NOW) == 0.0
    assert state.refreshed(NOW) is state
    assert state.describe() == "not rate limited"


def test_from_response_honours_retry_after():
    response = httpx.Response(429, headers={"Retry-After": "30"})

    state = RateLimitState.from_response(response, now=NOW)

    assert state.active
    assert state.release_at == NOW + 30
    assert state.is_limited(NOW + 29)
    assert not state.is_limited(NOW + 30)
    assert state.seconds_remaining(NOW + 10) == 20


def test_from_response_falls_back_to_default_cooldown():
    response = httpx.Response(429)

    assert RateLimitState.from_response(response, now=NOW).release_at == (
        NOW + DEFAULT_RATE_LIMIT_COOLDOWN
    )
    assert RateLimitState.from_response(response, now=NOW, default_cooldown=5).release_at == (
        NOW + 5
    )


def test_refreshed_clears_expired_limit():
    state = RateLimitState(active=True, release_at=NOW)

    assert state.refreshed(NOW - 1) is state
    assert state.refreshed(NOW + 1) == RateLimitState.inactive()


def test_state_is_immutable():
    state = RateLimitState(active=True, release_at=NOW)
    with pytest.raises(AttributeError):
        state.active = False  # type: ignore[misc]


def test_describe_active_state():
    assert RateLimitState(active=True, release_at=0.0).describe() == (
        "rate limited until 1970-01-01T00:00:00Z"
    )
