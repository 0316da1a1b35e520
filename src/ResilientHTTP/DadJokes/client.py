# === NAVMAP v1 ===
# {
#   "module": "ResilientHTTP.DadJokes.client",
#   "purpose": "Dad joke fetcher built on the resilient client, with 429 cooldown.",
#   "sections": [
#     {"id": "jokeunavailableerror", "name": "JokeUnavailableError", "anchor": "class-jokeunavailableerror", "kind": "class"},
#     {"id": "jokeclient", "name": "JokeClient", "anchor": "class-jokeclient", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Dad joke client.

Fetches jokes through a :class:`~ResilientHTTP.network.client.ResilientClient`
and layers two application concerns on top of it:

- payload parsing into :class:`~ResilientHTTP.DadJokes.schema.DadJoke`
- an HTTP 429 cooldown window honouring ``Retry-After``

The cooldown is held as an immutable
:class:`~ResilientHTTP.network.ratelimit.RateLimitState` owned by the
instance and replaced under an :class:`asyncio.Lock`, so tasks sharing one
``JokeClient`` agree on it while separate instances stay independent.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Callable

import httpx
from pydantic import ValidationError

from ResilientHTTP.config.models import JokeSettings
from ResilientHTTP.DadJokes.schema import FALLBACK_JOKE, DadJoke, JokeResult
from ResilientHTTP.errors import Failure, ResilientHTTPError, StatusFailure
from ResilientHTTP.network.client import ResilientClient
from ResilientHTTP.network.ratelimit import RateLimitState

LOGGER = logging.getLogger(__name__)

_TOO_MANY_REQUESTS = 429


class JokeUnavailableError(ResilientHTTPError):
    """No joke could be produced.

    Attributes:
        failure: The client failure behind the error, if any. ``None`` for
            rate-limit short circuits and parse errors.
    """

    def __init__(self, message: str, failure: Failure | None = None) -> None:
        super().__init__(message)
        self.failure = failure


class JokeClient:
    """Fetch dad jokes with fallback and rate-limit awareness.

    Args:
        client: Resilient client used for every request.
        settings: Endpoint and cooldown configuration.
        clock: Wall-clock source in epoch seconds (tests).
    """

    def __init__(
        self,
        client: ResilientClient,
        settings: JokeSettings | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self.settings = settings or JokeSettings()
        self._clock = clock
        self._rate_limit = RateLimitState.inactive()
        self._lock = asyncio.Lock()

    @property
    def rate_limit(self) -> RateLimitState:
        return self._rate_limit

    async def fetch(self) -> DadJoke:
        """Fetch and parse one joke.

        Raises:
            JokeUnavailableError: While rate limited, on any client failure,
                or when the body does not match :class:`DadJoke`.
        """
        await self._check_rate_limit()

        LOGGER.info("Attempting to fetch a new joke.")
        result = await self._client.execute(httpx.Request("GET", self.settings.url))

        match result:
            case httpx.Response():
                return self._parse(result)
            case StatusFailure(response=response) if response.status_code == _TOO_MANY_REQUESTS:
                state = await self._open_rate_limit(response)
                cooldown = math.ceil(state.seconds_remaining(self._clock()))
                raise JokeUnavailableError(
                    f"API rate limit hit. Try again after {cooldown} seconds.", result
                )
            case _:
                raise JokeUnavailableError(result.description, result)

    async def fetch_or_fallback(self) -> JokeResult:
        """Fetch one joke, substituting :data:`FALLBACK_JOKE` on any failure."""
        try:
            joke = await self.fetch()
        except JokeUnavailableError as exc:
            LOGGER.error(
                "Failed to fetch dad joke. Returning fallback joke.",
                extra={"extra_fields": {"event": "joke.fallback", "cause": str(exc)}},
            )
            return JokeResult(joke=FALLBACK_JOKE, error=str(exc), success=False)

        LOGGER.debug(
            "Successfully fetched and parsed dad joke",
            extra={"extra_fields": {"event": "joke.fetched", "id": joke.id, "joke": joke.joke}},
        )
        return JokeResult(joke=joke)

    async def _check_rate_limit(self) -> None:
        async with self._lock:
            now = self._clock()
            refreshed = self._rate_limit.refreshed(now)
            if refreshed is not self._rate_limit:
                LOGGER.info("Rate limit cooldown has passed. Resetting flag.")
                self._rate_limit = refreshed
            if self._rate_limit.is_limited(now):
                remaining = math.ceil(self._rate_limit.seconds_remaining(now))
                message = (
                    "Rate limited by a previous request. "
                    f"Please try again in about {remaining} seconds."
                )
                LOGGER.warning(message)
                raise JokeUnavailableError(message)

    async def _open_rate_limit(self, response: httpx.Response) -> RateLimitState:
        async with self._lock:
            state = RateLimitState.from_response(
                response,
                now=self._clock(),
                default_cooldown=self.settings.rate_limit_cooldown_s,
            )
            # Keep the later release time if another task already extended it.
            if not self._rate_limit.active or state.release_at > self._rate_limit.release_at:
                self._rate_limit = state
            LOGGER.warning(
                f"Rate limited by API (status 429), {self._rate_limit.describe()}",
                extra={
                    "extra_fields": {
                        "event": "joke.rate_limited",
                        "release_at": self._rate_limit.release_at,
                    }
                },
            )
            return self._rate_limit

    def _parse(self, response: httpx.Response) -> DadJoke:
        try:
            return DadJoke.model_validate_json(response.content)
        except ValidationError as exc:
            raise JokeUnavailableError(f"Failed to parse dad joke: {exc}") from exc


__all__ = ["JokeClient", "JokeUnavailableError"]
