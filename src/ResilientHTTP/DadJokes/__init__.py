"""Dad joke demo built on the resilient HTTP client."""

from ResilientHTTP.DadJokes.client import JokeClient, JokeUnavailableError
from ResilientHTTP.DadJokes.schema import FALLBACK_JOKE, DadJoke, JokeResult

__all__ = ["DadJoke", "FALLBACK_JOKE", "JokeResult", "JokeClient", "JokeUnavailableError"]
