"""Tests for lifecycle logging hooks."""

from __future__ import annotations

import asyncio
import logging

import httpx
import pytest

from ResilientHTTP.config.models import ClientPolicy, RetrySettings
from ResilientHTTP.errors import StatusFailure, TimeoutFailure, TransportFailure
from ResilientHTTP.network.client import ResilientClient
from ResilientHTTP.network.instrumentation import LoggingRequestHooks, safe_hook_call
from tests.fixtures.http_mocking import RecordingSleep, ScriptedTransport, connect_error

REQUEST = httpx.Request(
    "GET", "https://example.org/jokes?api_key=secret#frag", headers={"Accept": "text/plain"}
)


def _fields(record: logging.LogRecord) -> dict:
    return getattr(record, "extra_fields", {})


@pytest.fixture
def hooks_caplog(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    caplog.set_level(logging.DEBUG, logger="ResilientHTTP")
    return caplog


def test_attempt_record(hooks_caplog):
    LoggingRequestHooks().on_attempt(REQUEST, 0)

    (record,) = hooks_caplog.records
    assert record.levelno == logging.DEBUG
    assert _fields(record) == {
        "event": "http.attempt",
        "method": "GET",
        "url": "https://example.org/jokes",
        "attempt": 1,
        "accept": "text/plain",
    }


def test_retry_record_carries_delay(hooks_caplog):
    LoggingRequestHooks().on_retry(REQUEST, 1, 1.5, connect_error("refused"))

    (record,) = hooks_caplog.records
    assert record.levelno == logging.WARNING
    assert record.getMessage() == (
        "HTTP request transient failure. Next retry will be after a delay of ~1500ms."
    )
    assert _fields(record)["delay_ms"] == 1500
    assert _fields(record)["attempt"] == 2
    assert _fields(record)["error"] == "ConnectError: refused"


def test_success_record(hooks_caplog):
    LoggingRequestHooks().on_success(REQUEST, httpx.Response(204))

    (record,) = hooks_caplog.records
    assert _fields(record)["status"] == 204
    assert _fields(record)["event"] == "http.success"


@pytest.mark.parametrize(
    "failure, kind",
    [
        (TransportFailure(request=REQUEST, cause=connect_error()), "transport"),
        (TimeoutFailure(request=REQUEST, timeout=1.0), "timeout"),
        (
            StatusFailure(
                request=REQUEST,
                response=httpx.Response(404),
                description="Request failed with status 404",
            ),
            "status",
        ),
    ],
)
def test_failure_record(hooks_caplog, failure, kind):
    LoggingRequestHooks().on_failure(REQUEST, failure)

    (record,) = hooks_caplog.records
    assert record.levelno == logging.ERROR
    assert _fields(record)["kind"] == kind
    assert _fields(record)["cause"] == failure.description
    assert "secret" not in _fields(record)["url"]


def test_custom_logger():
    logger = logging.getLogger("tests.instrumentation.custom")
    assert LoggingRequestHooks(logger).logger is logger


def test_safe_hook_call_swallows_hook_errors():
    def _broken(*args):
        raise RuntimeError("boom")

    safe_hook_call(_broken, 1, 2)


def test_full_lifecycle_logging(hooks_caplog, monkeypatch):
    monkeypatch.setattr("ResilientHTTP.network.retry.random.uniform", lambda a, b: b)
    transport = ScriptedTransport(connect_error(), httpx.Response(200))
    policy = ClientPolicy(retry=RetrySettings(initial_delay_s=0.25))
    client = ResilientClient(transport, policy, sleep=RecordingSleep())

    asyncio.run(client.get("https://example.org/"))

    events = [
        _fields(record).get("event")
        for record in hooks_caplog.records
        if record.name == "ResilientHTTP.network.instrumentation"
    ]
    assert events == ["http.attempt", "http.retry", "http.attempt", "http.success"]
    retry = next(r for r in hooks_caplog.records if _fields(r).get("event") == "http.retry")
    assert _fields(retry)["delay_ms"] == 250
