"""Tenacity-based retry engine for transport-level failures.

Provides:
- Transience classification of transport exceptions
- Exponential backoff with full jitter (:class:`BackoffSchedule`)
- An async retry decorator around any ``send(request)`` callable

Only exceptions are classified here. A response of any status ends the retry
loop immediately; status evaluation happens downstream in
:mod:`ResilientHTTP.network.validation`.

Example:
    >>> policy = RetryPolicy(max_attempts=4, backoff=BackoffSchedule(1.0, 2.0))
    >>> send = with_retry(client.send, policy)
    >>> response = await send(httpx.Request("GET", "https://example.org"))
"""

from __future__ import annotations

import asyncio
import enum
import logging
import math
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt
from tenacity.wait import wait_base

from ResilientHTTP.network.instrumentation import NullRequestHooks, RequestHooks, safe_hook_call
from ResilientHTTP.network.policy import (
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY,
)
from ResilientHTTP.network.timeout import DeadlineExceeded, check_deadline

LOGGER = logging.getLogger(__name__)

Send = Callable[[httpx.Request], Awaitable[httpx.Response]]


# ============================================================================
# Classification
# ============================================================================


class Transience(enum.Enum):
    """Whether retrying a failure unchanged may succeed."""

    TRANSIENT = "transient"
    PERMANENT = "permanent"


_PERMANENT_HTTPX_ERRORS: tuple[type[BaseException], ...] = (
    httpx.LocalProtocolError,
    httpx.UnsupportedProtocol,
    httpx.InvalidURL,
    httpx.DecodingError,
    httpx.TooManyRedirects,
)

_TRANSIENT_HTTPX_ERRORS: tuple[type[BaseException], ...] = (
    httpx.NetworkError,
    httpx.TimeoutException,
    httpx.RemoteProtocolError,
    httpx.ProxyError,
)


def classify_exception(exc: BaseException) -> Transience:
    """Classify a transport exception as transient or permanent.

    Transient:
    - httpx network errors (connect/read/write/close) and every httpx timeout
    - ``RemoteProtocolError`` and ``ProxyError``
    - builtin ``ConnectionError`` / ``TimeoutError`` raised by custom transports
    - ``HTTPStatusError`` carrying a 5xx response

    Permanent:
    - malformed or unsupported requests (``LocalProtocolError``,
      ``UnsupportedProtocol``, ``InvalidURL``), decoding errors, redirect loops
    - an expired execute deadline
    - anything else, including non-``Exception`` cancellation signals
    """
    if not isinstance(exc, Exception) or isinstance(exc, DeadlineExceeded):
        return Transience.PERMANENT
    if isinstance(exc, _PERMANENT_HTTPX_ERRORS):
        return Transience.PERMANENT
    if isinstance(exc, _TRANSIENT_HTTPX_ERRORS):
        return Transience.TRANSIENT
    if isinstance(exc, httpx.HTTPStatusError):
        if exc.response.status_code >= 500:
            return Transience.TRANSIENT
        return Transience.PERMANENT
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return Transience.TRANSIENT
    return Transience.PERMANENT


# ============================================================================
# Backoff
# ============================================================================


@dataclass(frozen=True)
class BackoffSchedule:
    """Exponential backoff with optional full jitter.

    ``base_delay(n) = initial_delay * factor ** n`` (capped by ``max_delay``
    when set). With jitter enabled, ``delay(n)`` draws uniformly from
    ``[0, base_delay(n)]`` independently per attempt.

    Attributes:
        initial_delay: Base delay before the first retry (seconds).
        factor: Exponential multiplier, at least 1.
        max_delay: Optional ceiling for a single wait.
        jitter: Apply full jitter to each computed delay.
    """

    initial_delay: float = DEFAULT_INITIAL_DELAY
    factor: float = DEFAULT_BACKOFF_FACTOR
    max_delay: float | None = DEFAULT_MAX_DELAY
    jitter: bool = True

    def __post_init__(self) -> None:
        if self.initial_delay < 0:
            raise ValueError(f"initial_delay must be >= 0, got {self.initial_delay}")
        if self.factor < 1:
            raise ValueError(f"factor must be >= 1, got {self.factor}")
        if self.max_delay is not None and self.max_delay < 0:
            raise ValueError(f"max_delay must be >= 0, got {self.max_delay}")

    def base_delay(self, attempt_index: int) -> float:
        """Un-jittered delay after the attempt with index ``attempt_index``."""
        try:
            delay = self.initial_delay * (self.factor**attempt_index)
        except OverflowError:
            delay = math.inf
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay

    def delay(self, attempt_index: int) -> float:
        base = self.base_delay(attempt_index)
        if not self.jitter:
            return base
        return random.uniform(0.0, base)

    def __call__(self, attempt_index: int) -> float:
        return self.delay(attempt_index)


class _WaitBackoff(wait_base):
    """Tenacity wait strategy delegating to an attempt-index backoff function."""

    def __init__(self, backoff: Callable[[int], float]) -> None:
        self._backoff = backoff

    def __call__(self, retry_state: RetryCallState) -> float:
        # attempt_number is 1-based and refers to the attempt that just failed.
        return max(0.0, float(self._backoff(retry_state.attempt_number - 1)))


# ============================================================================
# Policy & State
# ============================================================================


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable retry policy shared by every execute call.

    Attributes:
        max_attempts: Total attempts including the first one (>= 1).
        classify: Maps a transport exception to :class:`Transience`.
        backoff: Maps a 0-based attempt index to the delay before the next attempt.
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    classify: Callable[[BaseException], Transience] = classify_exception
    backoff: Callable[[int], float] = field(default_factory=BackoffSchedule)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    def is_transient(self, exc: BaseException) -> bool:
        # Cancellation and other BaseExceptions are never retried, whatever
        # the configured classifier says.
        if not isinstance(exc, Exception):
            return False
        return self.classify(exc) is Transience.TRANSIENT


@dataclass
class RetryState:
    """Per-call retry bookkeeping; never shared between execute calls.

    Attributes:
        attempt_index: 0-based index of the current attempt.
        cumulative_delay: Total backoff scheduled so far (seconds).
    """

    attempt_index: int = 0
    cumulative_delay: float = 0.0


# ============================================================================
# Engine
# ============================================================================


def build_async_retrying(
    policy: RetryPolicy,
    *,
    before_sleep: Callable[[RetryCallState], None] | None = None,
    sleep: Callable[[float], Awaitable[None]] | None = None,
) -> AsyncRetrying:
    """Build a Tenacity ``AsyncRetrying`` controller for ``policy``.

    Args:
        policy: Attempt budget, classifier, and backoff.
        before_sleep: Hook invoked once per scheduled retry, after the delay is known.
        sleep: Awaitable sleep used for backoff waits (default :func:`asyncio.sleep`).

    Returns:
        Configured controller that re-raises the last exception when exhausted.
    """
    return AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=_WaitBackoff(policy.backoff),
        retry=retry_if_exception(policy.is_transient),
        before_sleep=before_sleep,
        sleep=sleep or asyncio.sleep,
        reraise=True,
    )


def with_retry(
    send: Send,
    policy: RetryPolicy,
    *,
    hooks: RequestHooks | None = None,
    sleep: Callable[[float], Awaitable[None]] | None = None,
) -> Send:
    """Wrap ``send`` with the retry policy.

    Each call gets a fresh :class:`RetryState`. A response (of any status)
    returns immediately. A permanent exception propagates immediately. A
    transient exception triggers a backoff wait and another attempt until
    ``policy.max_attempts`` is reached, after which the last exception
    propagates unchanged.

    When running under :func:`ResilientHTTP.network.timeout.with_timeout`, an
    attempt is never started once the governing deadline has passed.

    Args:
        send: Transport capability, e.g. ``httpx.AsyncClient.send``.
        policy: Retry policy.
        hooks: Lifecycle hooks for attempt and retry events.
        sleep: Awaitable sleep override (tests).

    Returns:
        Async callable with the same signature as ``send``.
    """
    hooks = hooks or NullRequestHooks()

    async def retrying_send(request: httpx.Request) -> httpx.Response:
        state = RetryState()

        def _before_sleep(retry_state: RetryCallState) -> None:
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
            state.cumulative_delay += delay
            error = retry_state.outcome.exception() if retry_state.outcome else None
            LOGGER.debug(
                f"retry attempt={state.attempt_index + 1} wait_ms={int(delay * 1000)} "
                f"cumulative_ms={int(state.cumulative_delay * 1000)}"
            )
            safe_hook_call(hooks.on_retry, request, state.attempt_index, delay, error)

        retrying = build_async_retrying(policy, before_sleep=_before_sleep, sleep=sleep)
        async for attempt in retrying:
            state.attempt_index = attempt.retry_state.attempt_number - 1
            check_deadline()
            safe_hook_call(hooks.on_attempt, request, state.attempt_index)
            with attempt:
                response = await send(request)
        return response

    return retrying_send


__all__ = [
    "Transience",
    "classify_exception",
    "BackoffSchedule",
    "RetryPolicy",
    "RetryState",
    "build_async_retrying",
    "with_retry",
]
