"""Tests for structured logging setup."""

from __future__ import annotations

import io
import json
import logging

from ResilientHTTP.logging_config import JSONFormatter, mask_sensitive_data, setup_logging


def test_mask_sensitive_data():
    masked = mask_sensitive_data(
        {
            "Authorization": "Bearer abc",
            "status": 200,
            "headers": {"cookie": "session=1", "accept": "application/json"},
            "url": "https://api.example.org/?apikey=123",
        }
    )

    assert masked["Authorization"] == "***masked***"
    assert masked["status"] == 200
    assert masked["headers"] == {"cookie": "***masked***", "accept": "application/json"}
    assert masked["url"] == "***masked***"


def test_json_formatter_merges_extra_fields():
    record = logging.makeLogRecord(
        {
            "name": "ResilientHTTP.network",
            "levelname": "WARNING",
            "msg": "retrying %s",
            "args": ("GET",),
            "extra_fields": {"event": "http.retry", "delay_ms": 500, "token": "t"},
        }
    )

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "retrying GET"
    assert payload["logger"] == "ResilientHTTP.network"
    assert payload["level"] == "WARNING"
    assert payload["event"] == "http.retry"
    assert payload["delay_ms"] == 500
    assert payload["token"] == "***masked***"
    assert payload["timestamp"].endswith("Z")


def test_setup_logging_json_output():
    stream = io.StringIO()
    logger = setup_logging("debug", json_output=True, stream=stream)

    logging.getLogger("ResilientHTTP.network.client").debug(
        "created", extra={"extra_fields": {"timeout_s": 15.0}}
    )

    assert logger.level == logging.DEBUG
    payload = json.loads(stream.getvalue().splitlines()[-1])
    assert payload["message"] == "created"
    assert payload["timeout_s"] == 15.0


def test_setup_logging_replaces_managed_handler():
    first = io.StringIO()
    second = io.StringIO()
    setup_logging("INFO", stream=first)
    logger = setup_logging("INFO", stream=second)

    managed = [h for h in logger.handlers if getattr(h, "_resilienthttp_managed", False)]
    assert len(managed) == 1

    logger.info("hello")
    assert first.getvalue() == ""
    assert second.getvalue() == "INFO: hello\n"
