"""Payload model for the icanhazdadjoke JSON API."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict


class DadJoke(BaseModel):
    """One joke as returned by ``GET https://icanhazdadjoke.com/``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    joke: str
    status: int


FALLBACK_JOKE = DadJoke(
    id="0000000000",
    joke="Why don't skeletons fight each other? They don't have the guts.",
    status=200,
)


@dataclass(frozen=True)
class JokeResult:
    """Outcome of :meth:`JokeClient.fetch_or_fallback`.

    Attributes:
        joke: The fetched joke, or :data:`FALLBACK_JOKE` on failure.
        error: Human readable reason the fallback was used.
        success: True when ``joke`` came from the API.
    """

    joke: DadJoke
    error: str | None = None
    success: bool = True


__all__ = ["DadJoke", "FALLBACK_JOKE", "JokeResult"]
