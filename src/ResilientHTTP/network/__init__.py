"""Network subsystem: resilient request pipeline around an HTTP transport.

This package layers cross-cutting concerns around a transport's ``send``:
- headers: default Accept/User-Agent injection (caller headers win)
- retry: Tenacity-based retry of transient transport failures with
  exponential backoff and full jitter
- timeout: one absolute deadline spanning all attempts
- validation: 2xx acceptance, everything else becomes a StatusFailure
- instrumentation: structured lifecycle logging hooks
- ratelimit: value-typed 429 cooldown state
- policy: default constants
- client: the ResilientClient composing all of the above

Example:
    >>> from ResilientHTTP.network import create_resilient_client
    >>> async with create_resilient_client() as client:
    ...     result = await client.get("https://icanhazdadjoke.com/")
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

from ResilientHTTP.network.headers import decorate_request, default_headers
from ResilientHTTP.network.instrumentation import (
    LoggingRequestHooks,
    NullRequestHooks,
    RequestHooks,
)
from ResilientHTTP.network.policy import (
    DEFAULT_ACCEPT,
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
)
from ResilientHTTP.network.ratelimit import RateLimitState, parse_retry_after
from ResilientHTTP.network.retry import (
    BackoffSchedule,
    RetryPolicy,
    RetryState,
    Transience,
    classify_exception,
    with_retry,
)
from ResilientHTTP.network.timeout import (
    Deadline,
    DeadlineExceeded,
    current_deadline,
    with_timeout,
)
from ResilientHTTP.network.validation import is_success_status, validate_response

# The client depends on the config models, which depend on this package's
# policy constants; resolve it lazily to keep that edge acyclic.
_CLIENT_EXPORTS = (
    "ResilientClient",
    "Transport",
    "build_retry_policy",
    "create_async_http_client",
    "create_resilient_client",
)

__all__ = [
    # Decoration
    "decorate_request",
    "default_headers",
    # Retry
    "BackoffSchedule",
    "RetryPolicy",
    "RetryState",
    "Transience",
    "classify_exception",
    "with_retry",
    # Deadline
    "Deadline",
    "DeadlineExceeded",
    "current_deadline",
    "with_timeout",
    # Validation
    "is_success_status",
    "validate_response",
    # Instrumentation
    "RequestHooks",
    "LoggingRequestHooks",
    "NullRequestHooks",
    # Rate limiting
    "RateLimitState",
    "parse_retry_after",
    # Defaults
    "DEFAULT_ACCEPT",
    "DEFAULT_BACKOFF_FACTOR",
    "DEFAULT_INITIAL_DELAY",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_TIMEOUT",
    "DEFAULT_USER_AGENT",
    # Client
    *_CLIENT_EXPORTS,
]


def __getattr__(name: str) -> Any:
    if name in _CLIENT_EXPORTS:
        value = getattr(import_module("ResilientHTTP.network.client"), name)
        globals()[name] = value
        return value
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
