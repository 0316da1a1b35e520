"""Value-typed rate-limit state derived from HTTP 429 responses.

A :class:`RateLimitState` is an immutable snapshot: ``active`` plus the
wall-clock instant (``release_at``, epoch seconds) at which the limit lifts.
Owners hold it explicitly, typically inside a client instance guarded by a
lock, and replace it wholesale instead of mutating shared flags.
"""

from __future__ import annotations

import email.utils
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import httpx

#: Cooldown applied when a 429 response carries no usable Retry-After header
DEFAULT_RATE_LIMIT_COOLDOWN = 60.0


def parse_retry_after(value: Optional[str], *, now: Optional[float] = None) -> Optional[float]:
    """Convert a Retry-After header value into a delay in seconds.

    Accepts both delta-seconds (``"120"``) and HTTP-date forms. Returns
    ``None`` for missing or unparseable values; past dates yield ``0.0``.
    """
    if not value:
        return None

    try:
        delay = float(int(value.strip()))
    except ValueError:
        try:
            dt = email.utils.parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        reference = now if now is not None else time.time()
        delay = dt.timestamp() - reference

    return max(0.0, delay)


@dataclass(frozen=True)
class RateLimitState:
    """Immutable rate-limit snapshot.

    Attributes:
        active: Whether a rate limit was observed and has not been cleared.
        release_at: Epoch seconds when the limit lifts (meaningful if active).
    """

    active: bool = False
    release_at: float = 0.0

    @classmethod
    def inactive(cls) -> RateLimitState:
        return cls()

    @classmethod
    def from_response(
        cls,
        response: httpx.Response,
        *,
        now: Optional[float] = None,
        default_cooldown: float = DEFAULT_RATE_LIMIT_COOLDOWN,
    ) -> RateLimitState:
        """Build the state implied by a 429 ``response``.

        Honours ``Retry-After`` when present, otherwise applies
        ``default_cooldown``.
        """
        reference = now if now is not None else time.time()
        cooldown = parse_retry_after(response.headers.get("Retry-After"), now=reference)
        if cooldown is None:
            cooldown = default_cooldown
        return cls(active=True, release_at=reference + cooldown)

    def is_limited(self, now: Optional[float] = None) -> bool:
        reference = now if now is not None else time.time()
        return self.active and reference < self.release_at

    def seconds_remaining(self, now: Optional[float] = None) -> float:
        if not self.active:
            return 0.0
        reference = now if now is not None else time.time()
        return max(0.0, self.release_at - reference)

    def refreshed(self, now: Optional[float] = None) -> RateLimitState:
        """Return an inactive state once the release time has passed."""
        if self.active and not self.is_limited(now):
            return RateLimitState.inactive()
        return self

    def describe(self) -> str:
        if not self.active:
            return "not rate limited"
        released = datetime.fromtimestamp(self.release_at, tz=timezone.utc)
        return f"rate limited until {released.isoformat().replace('+00:00', 'Z')}"


__all__ = [
    "DEFAULT_RATE_LIMIT_COOLDOWN",
    "RateLimitState",
    "parse_retry_after",
]
