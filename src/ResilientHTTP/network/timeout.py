"""Deadline enforcement for execute calls.

A single absolute deadline bounds the total latency of one execute call,
including every retry attempt and every backoff wait. The deadline is measured
from the moment the governed call starts and is never reset by retries.

Architecture:
    ::

        with_timeout(operation, 15.0)
            │
            ├── Deadline.after(15.0)          absolute, event-loop clock
            ├── _CURRENT_DEADLINE.set(...)    visible to the retry engine
            └── asyncio.timeout_at(when)      cancels the in-flight attempt
                    │                         or the pending backoff sleep
                    ▼
              operation(request)  ──►  result returned unchanged
                                  ──►  TimeoutFailure on expiry

The deadline is published through a :class:`contextvars.ContextVar`, so each
task (and therefore each concurrent execute call) sees only its own deadline.
The retry engine consults :func:`current_deadline` before starting an attempt,
which guarantees no attempt starts after the deadline even when a backoff
sleep ends at the same instant the deadline fires.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TypeVar

import httpx

from ResilientHTTP.errors import TimeoutFailure

T = TypeVar("T")


class DeadlineExceeded(TimeoutError):
    """Raised when work is about to start after its deadline has passed.

    Attributes:
        deadline: The deadline that was exceeded.
    """

    def __init__(self, deadline: Deadline) -> None:
        self.deadline = deadline
        super().__init__(f"Deadline of {deadline.timeout:g}s exceeded")


@dataclass(frozen=True)
class Deadline:
    """Absolute point in event-loop time bounding one execute call.

    Attributes:
        when: Loop time (``loop.time()``) at which the deadline expires.
        timeout: Original budget in seconds.
    """

    when: float
    timeout: float

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        loop = asyncio.get_running_loop()
        return cls(when=loop.time() + seconds, timeout=seconds)

    def remaining(self) -> float:
        """Seconds left until expiry; negative once expired."""
        return self.when - asyncio.get_running_loop().time()

    def expired(self) -> bool:
        return self.remaining() <= 0

    def check(self) -> None:
        """Raise :class:`DeadlineExceeded` if the deadline has passed."""
        if self.expired():
            raise DeadlineExceeded(self)


_CURRENT_DEADLINE: ContextVar[Deadline | None] = ContextVar(
    "resilienthttp_current_deadline", default=None
)


def current_deadline() -> Deadline | None:
    """Return the deadline governing the current task, if any."""
    return _CURRENT_DEADLINE.get()


def check_deadline() -> None:
    """Raise :class:`DeadlineExceeded` when the governing deadline has passed.

    Does nothing outside a governed call.
    """
    deadline = _CURRENT_DEADLINE.get()
    if deadline is not None:
        deadline.check()


def with_timeout(
    operation: Callable[[httpx.Request], Awaitable[T]],
    duration: float,
) -> Callable[[httpx.Request], Awaitable[T | TimeoutFailure]]:
    """Wrap ``operation`` so it races a deadline of ``duration`` seconds.

    Args:
        operation: Async callable taking the request. It may retry internally;
            the deadline spans all of its attempts.
        duration: Total budget in seconds, measured from call start.

    Returns:
        Async callable returning the operation's result unchanged, or a
        :class:`TimeoutFailure` carrying the request when the deadline wins.
        Exceptions raised by the operation itself propagate unchanged.

    Raises:
        ValueError: If ``duration`` is not positive.

    Example:
        >>> governed = with_timeout(client.send, 5.0)
        >>> result = await governed(httpx.Request("GET", "https://example.org"))
    """
    if duration <= 0:
        raise ValueError(f"Timeout must be positive, got {duration}")

    async def governed(request: httpx.Request) -> T | TimeoutFailure:
        deadline = Deadline.after(duration)
        token = _CURRENT_DEADLINE.set(deadline)
        scope = asyncio.timeout_at(deadline.when)
        try:
            async with scope:
                result = await operation(request)
        except TimeoutError as exc:
            if scope.expired() or (
                isinstance(exc, DeadlineExceeded) and exc.deadline is deadline
            ):
                return TimeoutFailure(request=request, timeout=duration)
            raise
        finally:
            _CURRENT_DEADLINE.reset(token)

        # An attempt that ignored cancellation and finished late is discarded.
        if scope.expired():
            return TimeoutFailure(request=request, timeout=duration)
        return result

    return governed


__all__ = [
    "Deadline",
    "DeadlineExceeded",
    "current_deadline",
    "check_deadline",
    "with_timeout",
]
