"""Typed configuration for the resilient client and the demo application.

Models are Pydantic v2, frozen, and reject unknown keys. Use
:func:`load_config` to compose file, environment (``RHTTP_*``), and CLI
override layers into a validated :class:`AppConfig`.
"""

from ResilientHTTP.config.loader import export_config_schema, load_config, validate_config_file
from ResilientHTTP.config.models import (
    AppConfig,
    ClientPolicy,
    JokeSettings,
    LoggingSettings,
    RetrySettings,
)

__all__ = [
    "AppConfig",
    "ClientPolicy",
    "JokeSettings",
    "LoggingSettings",
    "RetrySettings",
    "load_config",
    "validate_config_file",
    "export_config_schema",
]
