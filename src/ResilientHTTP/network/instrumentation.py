# === NAVMAP v1 ===
# {
#   "module": "ResilientHTTP.network.instrumentation",
#   "purpose": "Lifecycle hooks emitting structured request/response log records.",
#   "sections": [
#     {
#       "id": "requesthooks",
#       "name": "RequestHooks",
#       "anchor": "class-requesthooks",
#       "kind": "class"
#     },
#     {
#       "id": "loggingrequesthooks",
#       "name": "LoggingRequestHooks",
#       "anchor": "class-loggingrequesthooks",
#       "kind": "class"
#     },
#     {
#       "id": "safe-hook-call",
#       "name": "safe_hook_call",
#       "anchor": "function-safe-hook-call",
#       "kind": "function"
#     },
#     {
#       "id": "redact-url",
#       "name": "_redact_url",
#       "anchor": "function-redact-url",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""HTTP lifecycle instrumentation.

Hooks fire at four points of an execute call:

- ``on_attempt``: before each transport attempt (method, URL, Accept header)
- ``on_retry``: when a transient failure schedules another attempt (delay)
- ``on_success``: once, after the response passed validation (status, URL)
- ``on_failure``: once, when the call ends in a failure (cause, URL)

Hooks observe; they never steer. :func:`safe_hook_call` swallows hook errors
so that removing or breaking instrumentation cannot change an outcome.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol
from urllib.parse import urlparse, urlunparse

import httpx

from ResilientHTTP.errors import Failure, StatusFailure, TimeoutFailure, TransportFailure

LOGGER = logging.getLogger(__name__)


class RequestHooks(Protocol):
    """Observer interface for the resilient client lifecycle."""

    def on_attempt(self, request: httpx.Request, attempt_index: int) -> None: ...

    def on_retry(
        self,
        request: httpx.Request,
        attempt_index: int,
        delay: float,
        error: BaseException,
    ) -> None: ...

    def on_success(self, request: httpx.Request, response: httpx.Response) -> None: ...

    def on_failure(self, request: httpx.Request, failure: Failure) -> None: ...


class NullRequestHooks:
    """Hooks that do nothing; used when instrumentation is disabled."""

    def on_attempt(self, request: httpx.Request, attempt_index: int) -> None:
        return None

    def on_retry(
        self,
        request: httpx.Request,
        attempt_index: int,
        delay: float,
        error: BaseException,
    ) -> None:
        return None

    def on_success(self, request: httpx.Request, response: httpx.Response) -> None:
        return None

    def on_failure(self, request: httpx.Request, failure: Failure) -> None:
        return None


class LoggingRequestHooks:
    """Emit one structured log record per lifecycle event.

    Records carry a flat ``extra_fields`` mapping which
    :class:`ResilientHTTP.logging_config.JSONFormatter` merges into the JSON
    payload.

    Attributes:
        logger: Destination logger (defaults to this module's logger).
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or LOGGER

    def on_attempt(self, request: httpx.Request, attempt_index: int) -> None:
        self.logger.debug(
            "Attempting HTTP request",
            extra={
                "extra_fields": {
                    "event": "http.attempt",
                    "method": request.method,
                    "url": _redact_url(str(request.url)),
                    "attempt": attempt_index + 1,
                    "accept": request.headers.get("Accept"),
                }
            },
        )

    def on_retry(
        self,
        request: httpx.Request,
        attempt_index: int,
        delay: float,
        error: BaseException,
    ) -> None:
        delay_ms = int(delay * 1000)
        self.logger.warning(
            f"HTTP request transient failure. Next retry will be after a delay of ~{delay_ms}ms.",
            extra={
                "extra_fields": {
                    "event": "http.retry",
                    "method": request.method,
                    "url": _redact_url(str(request.url)),
                    "attempt": attempt_index + 1,
                    "delay_ms": delay_ms,
                    "error": f"{type(error).__name__}: {error}",
                }
            },
        )

    def on_success(self, request: httpx.Request, response: httpx.Response) -> None:
        self.logger.debug(
            "HTTP request succeeded",
            extra={
                "extra_fields": {
                    "event": "http.success",
                    "status": response.status_code,
                    "url": _redact_url(str(request.url)),
                }
            },
        )

    def on_failure(self, request: httpx.Request, failure: Failure) -> None:
        self.logger.error(
            "HTTP request failed",
            extra={
                "extra_fields": {
                    "event": "http.failure",
                    "kind": _failure_kind(failure),
                    "cause": failure.description,
                    "url": _redact_url(str(request.url)),
                }
            },
        )


def safe_hook_call(hook: Callable[..., Any], *args: Any) -> None:
    """Invoke ``hook`` and swallow any exception it raises.

    Instrumentation must never alter the control flow of a request, so hook
    errors are logged at DEBUG and otherwise ignored.
    """
    try:
        hook(*args)
    except Exception as exc:  # noqa: BLE001 - hooks are best-effort
        LOGGER.debug(f"Request hook {getattr(hook, '__qualname__', hook)!r} failed: {exc}")


def _failure_kind(failure: Failure) -> str:
    match failure:
        case TransportFailure():
            return "transport"
        case TimeoutFailure():
            return "timeout"
        case StatusFailure():
            return "status"
    return "unknown"


def _redact_url(url: str) -> str:
    """Strip query string and fragment, keeping scheme, host, and path."""
    try:
        parsed = urlparse(url)
        return urlunparse((parsed.scheme, parsed.netloc, parsed.path, "", "", ""))
    except ValueError:
        return "[URL_REDACTION_FAILED]"


__all__ = [
    "RequestHooks",
    "NullRequestHooks",
    "LoggingRequestHooks",
    "safe_hook_call",
]
