# === NAVMAP v1 ===
# {
#   "module": "ResilientHTTP.network.client",
#   "purpose": "Resilient HTTP client wrapper composing decoration, retry, deadline, and validation.",
#   "sections": [
#     {
#       "id": "transport",
#       "name": "Transport",
#       "anchor": "class-transport",
#       "kind": "class"
#     },
#     {
#       "id": "build-retry-policy",
#       "name": "build_retry_policy",
#       "anchor": "function-build-retry-policy",
#       "kind": "function"
#     },
#     {
#       "id": "resilientclient",
#       "name": "ResilientClient",
#       "anchor": "class-resilientclient",
#       "kind": "class"
#     },
#     {
#       "id": "create-async-http-client",
#       "name": "create_async_http_client",
#       "anchor": "function-create-async-http-client",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Resilient HTTP client wrapper.

Layers cross-cutting concerns around a transport's ``send`` capability:

    caller
      │  httpx.Request
      ▼
    decorate_request        default Accept / User-Agent, caller headers win
      ▼
    with_timeout            one absolute deadline for the whole call
      ▼
    with_retry              transient transport failures, backoff + jitter
      ▼
    transport.send          e.g. httpx.AsyncClient.send
      │
      ▼
    validate_response       2xx accepted, anything else -> StatusFailure

Every call to :meth:`ResilientClient.execute` returns exactly one of a
validated :class:`httpx.Response` or a :data:`~ResilientHTTP.errors.Failure`.
The wrapper keeps no per-call state on the instance, so one client can serve
many concurrent callers.

Example:
    >>> async with create_resilient_client() as client:
    ...     result = await client.execute(httpx.Request("GET", "https://icanhazdadjoke.com/"))
    ...     match result:
    ...         case httpx.Response():
    ...             print(result.json())
    ...         case failure:
    ...             print(failure.description)
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

import httpx

from ResilientHTTP.config.models import ClientPolicy
from ResilientHTTP.errors import (
    ExecuteResult,
    Failure,
    TimeoutFailure,
    TransportFailure,
    unwrap,
)
from ResilientHTTP.network.headers import decorate_request, default_headers
from ResilientHTTP.network.instrumentation import (
    LoggingRequestHooks,
    RequestHooks,
    safe_hook_call,
)
from ResilientHTTP.network.retry import BackoffSchedule, RetryPolicy, with_retry
from ResilientHTTP.network.timeout import with_timeout
from ResilientHTTP.network.validation import validate_response

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """The single capability the wrapper needs from the underlying client."""

    async def send(self, request: httpx.Request) -> httpx.Response: ...


def build_retry_policy(policy: ClientPolicy) -> RetryPolicy:
    """Translate validated configuration into the retry engine's policy."""
    retry = policy.retry
    return RetryPolicy(
        max_attempts=retry.max_attempts,
        backoff=BackoffSchedule(
            initial_delay=retry.initial_delay_s,
            factor=retry.factor,
            max_delay=retry.max_delay_s,
            jitter=retry.jitter,
        ),
    )


class ResilientClient:
    """Decorates a transport with default headers, retry, deadline, and validation.

    Attributes:
        policy: Immutable configuration shared by all calls.
        hooks: Lifecycle observers (logging by default).
    """

    def __init__(
        self,
        transport: Transport,
        policy: ClientPolicy | None = None,
        *,
        hooks: RequestHooks | None = None,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
        owns_transport: bool = False,
    ) -> None:
        self.policy = policy or ClientPolicy()
        self.hooks = hooks if hooks is not None else LoggingRequestHooks()
        self._transport = transport
        self._owns_transport = owns_transport
        self._default_headers = default_headers(
            user_agent=self.policy.user_agent,
            accept=self.policy.accept,
        )
        self._retry_policy = retry_policy or build_retry_policy(self.policy)
        self._governed = with_timeout(
            with_retry(transport.send, self._retry_policy, hooks=self.hooks, sleep=sleep),
            self.policy.timeout_s,
        )

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    async def execute(self, request: httpx.Request) -> ExecuteResult:
        """Execute ``request`` and return a validated response or a failure.

        Never raises for transport, deadline, or status problems; those come
        back as :class:`TransportFailure`, :class:`TimeoutFailure`, or
        :class:`~ResilientHTTP.errors.StatusFailure`. Failures carry the
        caller's original request.
        """
        decorated = decorate_request(request, self._default_headers)
        try:
            outcome = await self._governed(decorated)
        except Exception as exc:  # noqa: BLE001 - surfaced as a failure value
            return self._fail(request, TransportFailure(request=request, cause=exc))

        if isinstance(outcome, TimeoutFailure):
            return self._fail(request, dataclasses.replace(outcome, request=request))

        validated = validate_response(request, outcome)
        if isinstance(validated, httpx.Response):
            safe_hook_call(self.hooks.on_success, decorated, validated)
            return validated
        return self._fail(request, validated)

    async def execute_or_raise(self, request: httpx.Request) -> httpx.Response:
        """Like :meth:`execute` but raise :class:`~ResilientHTTP.errors.RequestFailedError`."""
        return unwrap(await self.execute(request))

    async def get(self, url: str | httpx.URL, **kwargs) -> ExecuteResult:
        return await self.execute(httpx.Request("GET", url, **kwargs))

    def _fail(self, request: httpx.Request, failure: Failure) -> Failure:
        safe_hook_call(self.hooks.on_failure, request, failure)
        return failure

    async def aclose(self) -> None:
        """Close the wrapped transport when this client created it."""
        if self._owns_transport:
            aclose = getattr(self._transport, "aclose", None)
            if aclose is not None:
                await aclose()

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def create_async_http_client(policy: ClientPolicy | None = None, **kwargs) -> httpx.AsyncClient:
    """Create the default ``httpx.AsyncClient`` transport.

    The per-phase httpx timeout is set to the execute deadline; the deadline
    itself is enforced by the wrapper. Extra keyword arguments are passed to
    :class:`httpx.AsyncClient` (e.g. ``transport=httpx.MockTransport(...)``).
    """
    policy = policy or ClientPolicy()
    kwargs.setdefault("timeout", httpx.Timeout(policy.timeout_s))
    kwargs.setdefault("follow_redirects", policy.follow_redirects)
    client = httpx.AsyncClient(**kwargs)
    logger.debug(
        "HTTPX async client created",
        extra={
            "extra_fields": {
                "timeout_s": policy.timeout_s,
                "follow_redirects": policy.follow_redirects,
            }
        },
    )
    return client


def create_resilient_client(
    policy: ClientPolicy | None = None,
    *,
    transport: Transport | None = None,
    hooks: RequestHooks | None = None,
) -> ResilientClient:
    """Build a :class:`ResilientClient`, creating an owned httpx transport if needed."""
    policy = policy or ClientPolicy()
    if transport is None:
        return ResilientClient(
            create_async_http_client(policy),
            policy,
            hooks=hooks,
            owns_transport=True,
        )
    return ResilientClient(transport, policy, hooks=hooks)


__all__ = [
    "Transport",
    "ResilientClient",
    "build_retry_policy",
    "create_async_http_client",
    "create_resilient_client",
]
