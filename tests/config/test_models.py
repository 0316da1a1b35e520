"""Tests for the configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from ResilientHTTP.config.models import (
    AppConfig,
    ClientPolicy,
    JokeSettings,
    LoggingSettings,
    RetrySettings,
)


def test_defaults():
    config = AppConfig()

    assert config.client.retry.max_attempts == 4
    assert config.client.retry.initial_delay_s == 1.0
    assert config.client.retry.factor == 2.0
    assert config.client.retry.max_delay_s is None
    assert config.client.timeout_s == 15.0
    assert config.client.accept == "application/json"
    assert config.client.user_agent.startswith("ResilientHTTP/")
    assert config.logging.level == "INFO"
    assert config.jokes.url == "https://icanhazdadjoke.com/"
    assert config.jokes.rate_limit_cooldown_s == 60.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_attempts": 0},
        {"initial_delay_s": -1},
        {"factor": 0.5},
        {"initial_delay_s": 2.0, "max_delay_s": 1.0},
    ],
)
def test_retry_settings_validation(kwargs):
    with pytest.raises(ValidationError):
        RetrySettings(**kwargs)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"timeout_s": 0},
        {"user_agent": "   "},
        {"accept": "application/json\r\nX-Injected: 1"},
    ],
)
def test_client_policy_validation(kwargs):
    with pytest.raises(ValidationError):
        ClientPolicy(**kwargs)


def test_unknown_keys_rejected():
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"client": {"retries": 3}})


def test_models_are_frozen():
    policy = ClientPolicy()
    with pytest.raises(ValidationError):
        policy.timeout_s = 1.0  # type: ignore[misc]


def test_logging_level_normalized():
    assert LoggingSettings(level="debug").level == "DEBUG"
    with pytest.raises(ValidationError):
        LoggingSettings(level="chatty")


def test_joke_url_must_be_http():
    with pytest.raises(ValidationError):
        JokeSettings(url="ftp://jokes.example")


def test_config_hash_is_stable_and_sensitive():
    assert AppConfig().config_hash() == AppConfig().config_hash()
    changed = AppConfig(client=ClientPolicy(timeout_s=5))
    assert changed.config_hash() != AppConfig().config_hash()
