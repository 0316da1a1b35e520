"""Public API for the ResilientHTTP client wrapper.

This facade exposes the resilient client, its policy configuration, and the
failure variants returned by ``execute``. Exports are imported lazily so that
``import ResilientHTTP`` stays cheap and free of import cycles.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__version__ = "1.0.0"

_EXPORTS: dict[str, str] = {
    # Client
    "ResilientClient": "ResilientHTTP.network.client",
    "create_resilient_client": "ResilientHTTP.network.client",
    "create_async_http_client": "ResilientHTTP.network.client",
    # Policy configuration
    "AppConfig": "ResilientHTTP.config.models",
    "ClientPolicy": "ResilientHTTP.config.models",
    "RetrySettings": "ResilientHTTP.config.models",
    "load_config": "ResilientHTTP.config.loader",
    # Retry engine
    "BackoffSchedule": "ResilientHTTP.network.retry",
    "RetryPolicy": "ResilientHTTP.network.retry",
    "Transience": "ResilientHTTP.network.retry",
    # Failures
    "Failure": "ResilientHTTP.errors",
    "ExecuteResult": "ResilientHTTP.errors",
    "TransportFailure": "ResilientHTTP.errors",
    "TimeoutFailure": "ResilientHTTP.errors",
    "StatusFailure": "ResilientHTTP.errors",
    "RequestFailedError": "ResilientHTTP.errors",
    "ResilientHTTPError": "ResilientHTTP.errors",
    "unwrap": "ResilientHTTP.errors",
}

__all__ = ["__version__", *_EXPORTS]

if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from ResilientHTTP.config.loader import load_config
    from ResilientHTTP.config.models import AppConfig, ClientPolicy, RetrySettings
    from ResilientHTTP.errors import (
        ExecuteResult,
        Failure,
        RequestFailedError,
        ResilientHTTPError,
        StatusFailure,
        TimeoutFailure,
        TransportFailure,
        unwrap,
    )
    from ResilientHTTP.network.client import (
        ResilientClient,
        create_async_http_client,
        create_resilient_client,
    )
    from ResilientHTTP.network.retry import BackoffSchedule, RetryPolicy, Transience


def __getattr__(name: str) -> Any:
    """Lazily import public exports on first access."""

    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
    value = getattr(import_module(module_name), name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    """Expose lazily-populated attributes in ``dir()`` results."""

    return sorted(set(globals()) | set(__all__))
