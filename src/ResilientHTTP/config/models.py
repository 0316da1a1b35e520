# === NAVMAP v1 ===
# {
#   "module": "ResilientHTTP.config.models",
#   "purpose": "Pydantic v2 configuration models for the resilient client and demo app.",
#   "sections": [
#     {"id": "retrysettings", "name": "RetrySettings", "anchor": "class-retrysettings", "kind": "class"},
#     {"id": "clientpolicy", "name": "ClientPolicy", "anchor": "class-clientpolicy", "kind": "class"},
#     {"id": "loggingsettings", "name": "LoggingSettings", "anchor": "class-loggingsettings", "kind": "class"},
#     {"id": "jokesettings", "name": "JokeSettings", "anchor": "class-jokesettings", "kind": "class"},
#     {"id": "appconfig", "name": "AppConfig", "anchor": "class-appconfig", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Configuration models.

Focused, single-responsibility Pydantic v2 models. All models are frozen and
reject unknown keys so typos in YAML or ``RHTTP_*`` variables fail loudly.
"""

from __future__ import annotations

import hashlib
import json
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ResilientHTTP.network.policy import (
    DEFAULT_ACCEPT,
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
)
from ResilientHTTP.network.ratelimit import DEFAULT_RATE_LIMIT_COOLDOWN


class RetrySettings(BaseModel):
    """Retry budget and exponential backoff."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_attempts: int = Field(
        default=DEFAULT_MAX_ATTEMPTS, ge=1, description="Total attempts (initial + retries)"
    )
    initial_delay_s: float = Field(
        default=DEFAULT_INITIAL_DELAY, ge=0, description="Delay before the first retry (seconds)"
    )
    factor: float = Field(
        default=DEFAULT_BACKOFF_FACTOR, ge=1.0, description="Exponential multiplier"
    )
    max_delay_s: float | None = Field(
        default=DEFAULT_MAX_DELAY, ge=0, description="Ceiling for a single wait (seconds)"
    )
    jitter: bool = Field(default=True, description="Apply full jitter to each delay")

    @model_validator(mode="after")
    def validate_max_delay(self) -> RetrySettings:
        if self.max_delay_s is not None and self.max_delay_s < self.initial_delay_s:
            raise ValueError("max_delay_s must be >= initial_delay_s")
        return self


class ClientPolicy(BaseModel):
    """Resilient client policy: retry, deadline, and default headers."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    retry: RetrySettings = Field(default_factory=RetrySettings)
    timeout_s: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, description="Deadline across all attempts (seconds)"
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="Default User-Agent")
    accept: str = Field(default=DEFAULT_ACCEPT, description="Default Accept header")
    follow_redirects: bool = Field(default=True, description="Let httpx follow redirects")

    @field_validator("user_agent", "accept")
    @classmethod
    def validate_header_value(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("header values must not be empty")
        if "\n" in v or "\r" in v:
            raise ValueError("header values must not contain line breaks")
        return v


class LoggingSettings(BaseModel):
    """Logging level and output format."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = Field(default=False, description="Emit JSON lines instead of text")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.upper()
        return v


class JokeSettings(BaseModel):
    """Demo joke client settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str = Field(default="https://icanhazdadjoke.com/", description="Joke API endpoint")
    rate_limit_cooldown_s: float = Field(
        default=DEFAULT_RATE_LIMIT_COOLDOWN,
        ge=0,
        description="Cooldown after HTTP 429 when Retry-After is absent",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return v


class AppConfig(BaseModel):
    """Root configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    client: ClientPolicy = Field(default_factory=ClientPolicy)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    jokes: JokeSettings = Field(default_factory=JokeSettings)

    def config_hash(self) -> str:
        """Stable SHA-256 of the canonical JSON form."""
        canonical = json.dumps(self.model_dump(mode="json"), sort_keys=True)
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


__all__ = [
    "RetrySettings",
    "ClientPolicy",
    "LoggingSettings",
    "JokeSettings",
    "AppConfig",
]
