# === NAVMAP v1 ===
# {
#   "module": "ResilientHTTP.config.loader",
#   "purpose": "Configuration loading with file/env/CLI precedence.",
#   "sections": [
#     {"id": "read-file", "name": "_read_file", "anchor": "function-read-file", "kind": "function"},
#     {"id": "assign-nested", "name": "_assign_nested", "anchor": "function-assign-nested", "kind": "function"},
#     {"id": "coerce-env-value", "name": "_coerce_env_value", "anchor": "function-coerce-env-value", "kind": "function"},
#     {"id": "merge-env-overrides", "name": "_merge_env_overrides", "anchor": "function-merge-env-overrides", "kind": "function"},
#     {"id": "merge-overrides", "name": "_merge_overrides", "anchor": "function-merge-overrides", "kind": "function"},
#     {"id": "load-config", "name": "load_config", "anchor": "function-load-config", "kind": "function"},
#     {"id": "validate-config-file", "name": "validate_config_file", "anchor": "function-validate-config-file", "kind": "function"},
#     {"id": "export-config-schema", "name": "export_config_schema", "anchor": "function-export-config-schema", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""
Configuration loading with file/env/CLI precedence.

Three levels are composed, later levels winning:
1. **File** (YAML/JSON): base configuration
2. **Environment**: ``RHTTP_*`` variables
3. **CLI**: programmatic overrides

Environment variables use double-underscore nesting:
  RHTTP_CLIENT__TIMEOUT_S=5                 ->  client.timeout_s = 5
  RHTTP_CLIENT__RETRY__MAX_ATTEMPTS=2       ->  client.retry.max_attempts = 2
  RHTTP_LOGGING__JSON_OUTPUT=true           ->  logging.json_output = True

Values are parsed as JSON when possible and left as strings otherwise.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ResilientHTTP.config.models import AppConfig
from ResilientHTTP.errors import ConfigurationError

_LOGGER = logging.getLogger(__name__)

DEFAULT_ENV_PREFIX = "RHTTP_"

# ============================================================================
# Helpers
# ============================================================================


def _read_file(path: str | Path) -> dict[str, Any]:
    """
    Read a YAML or JSON config file.

    Args:
        path: File path (suffix selects the format: .yaml/.yml or .json)

    Returns:
        Parsed config dictionary (empty for an empty file)

    Raises:
        ConfigurationError: If the file is missing, unreadable, malformed,
            or does not contain a mapping
    """
    p = Path(path)
    if not p.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

    suffix = p.suffix.lower()
    if suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    elif suffix == ".json":
        try:
            data = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
    else:
        raise ConfigurationError(f"Unsupported file format: {suffix}. Use .yaml or .json")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping at the top level")
    return data


def _assign_nested(data: dict[str, Any], dotted_key: str, value: Any) -> None:
    """
    Assign ``value`` into ``data`` following a dotted path.

    Example:
        _assign_nested(data, "client.retry.factor", 3)
        -> data["client"]["retry"]["factor"] = 3
    """
    keys = dotted_key.split(".")
    current = data

    for key in keys[:-1]:
        existing = current.get(key)
        if not isinstance(existing, dict):
            existing = {}
            current[key] = existing
        current = existing

    current[keys[-1]] = value


def _coerce_env_value(value: str) -> Any:
    """
    Coerce an environment string to a typed value.

    JSON first (numbers, booleans, null, lists, objects), then
    case-insensitive booleans, then the raw string.
    """
    try:
        return json.loads(value)
    except ValueError:
        pass

    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    return value


def _merge_env_overrides(
    data: dict[str, Any],
    env_prefix: str = DEFAULT_ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """
    Overlay ``<prefix>*`` environment variables onto ``data``.

    ``<prefix>CONFIG`` names the config file itself and is skipped.

    Args:
        data: Base config dict (modified in place)
        env_prefix: Environment variable prefix
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        The modified ``data``
    """
    environ = os.environ if environ is None else environ
    for env_key, env_value in environ.items():
        if not env_key.startswith(env_prefix):
            continue

        relative_key = env_key[len(env_prefix) :].lower()
        if not relative_key or relative_key == "config":
            continue
        dotted_key = relative_key.replace("__", ".")

        coerced_value = _coerce_env_value(env_value)
        _assign_nested(data, dotted_key, coerced_value)
        _LOGGER.debug(f"Environment override: {env_key} -> {dotted_key} = {coerced_value!r}")

    return data


def _merge_overrides(
    data: dict[str, Any], overrides: Mapping[str, Any] | None
) -> dict[str, Any]:
    """
    Recursively merge ``overrides`` into ``data``; later values win.

    Keys may be nested mappings or dotted paths (``"client.timeout_s"``).
    """
    if not overrides:
        return data

    for key, value in overrides.items():
        if "." in key:
            _assign_nested(data, key, value)
        elif isinstance(value, Mapping) and isinstance(data.get(key), dict):
            data[key] = _merge_overrides(data[key], value)
        else:
            data[key] = dict(value) if isinstance(value, Mapping) else value
        _LOGGER.debug(f"CLI override: {key} = {value!r}")

    return data


# ============================================================================
# Public API
# ============================================================================


def load_config(
    path: str | Path | None = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    cli_overrides: Mapping[str, Any] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """
    Load :class:`AppConfig` from file, environment, and CLI overrides.

    **Precedence:** file < environment < CLI

    Args:
        path: Path to a YAML/JSON config file (optional)
        env_prefix: Environment variable prefix (default: ``RHTTP_``)
        cli_overrides: Override mapping, nested or dotted keys (optional)
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Validated, frozen :class:`AppConfig`

    Raises:
        ConfigurationError: If the file cannot be read or the merged
            configuration fails validation
    """
    data: dict[str, Any] = {}

    if path:
        data = _read_file(path)
        _LOGGER.info(f"Loaded config from {path}")

    data = _merge_env_overrides(data, env_prefix, environ)
    data = _merge_overrides(data, cli_overrides)

    try:
        config = AppConfig.model_validate(data)
    except ValidationError as e:
        _LOGGER.error(f"Configuration validation failed: {e}")
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    _LOGGER.debug(f"Configuration validated. Config hash: {config.config_hash()[:8]}...")
    return config


def validate_config_file(path: str | Path) -> bool:
    """
    Validate a config file, ignoring environment overrides.

    Returns:
        True if valid

    Raises:
        ConfigurationError: If invalid
    """
    load_config(path=path, environ={})
    return True


def export_config_schema() -> dict[str, Any]:
    """Export the JSON Schema for :class:`AppConfig` (Pydantic v2 format)."""
    return AppConfig.model_json_schema()


__all__ = [
    "DEFAULT_ENV_PREFIX",
    "load_config",
    "validate_config_file",
    "export_config_schema",
]
