# === NAVMAP v1 ===
# {
#   "module": "ResilientHTTP.errors",
#   "purpose": "Failure variants returned by the resilient client and the exception hierarchy",
#   "sections": [
#     {"id": "exceptions", "name": "Exceptions", "anchor": "EXC", "kind": "api"},
#     {"id": "failures", "name": "Failure Variants", "anchor": "FAIL", "kind": "api"},
#     {"id": "helpers", "name": "Result Helpers", "anchor": "HLP", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Failure values and exceptions shared across the resilient HTTP stack.

The client reports every unsuccessful ``execute`` call as one of three frozen
failure records rather than raising. Together they form the closed
:data:`Failure` union, so callers can ``match`` on the variant:

>>> match result:
...     case httpx.Response():
...         ...
...     case StatusFailure(response=response):
...         ...
...     case TransportFailure() | TimeoutFailure():
...         ...

Callers that prefer exceptions convert a failure with
:meth:`~TransportFailure.to_exception` or :func:`unwrap`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

import httpx

__all__ = [
    "ResilientHTTPError",
    "ConfigurationError",
    "RequestFailedError",
    "TransportFailure",
    "TimeoutFailure",
    "StatusFailure",
    "Failure",
    "ExecuteResult",
    "is_failure",
    "unwrap",
]


class ResilientHTTPError(RuntimeError):
    """Base exception for the resilient HTTP client."""


class ConfigurationError(ResilientHTTPError):
    """Raised when configuration files, environment, or CLI overrides are invalid."""


class RequestFailedError(ResilientHTTPError):
    """Raised by :func:`unwrap` when an execute result carries a failure."""

    def __init__(self, failure: Failure) -> None:
        super().__init__(failure.description)
        self.failure = failure

    @property
    def request(self) -> httpx.Request:
        return self.failure.request


@dataclass(frozen=True)
class TransportFailure:
    """The underlying transport could not complete the exchange."""

    request: httpx.Request
    cause: BaseException

    @property
    def description(self) -> str:
        return f"Transport error: {type(self.cause).__name__}: {self.cause}"

    def to_exception(self) -> RequestFailedError:
        error = RequestFailedError(self)
        error.__cause__ = self.cause
        return error


@dataclass(frozen=True)
class TimeoutFailure:
    """The deadline elapsed before any attempt completed."""

    request: httpx.Request
    timeout: float

    @property
    def description(self) -> str:
        return (
            f"Request timed out after {self.timeout:g}s "
            "(across all retry attempts or during the initial attempt)"
        )

    def to_exception(self) -> RequestFailedError:
        return RequestFailedError(self)


@dataclass(frozen=True)
class StatusFailure:
    """The transport succeeded but the response status is outside 2xx."""

    request: httpx.Request
    response: httpx.Response
    description: str

    @property
    def status(self) -> int:
        return self.response.status_code

    def to_exception(self) -> RequestFailedError:
        return RequestFailedError(self)


Failure: TypeAlias = TransportFailure | TimeoutFailure | StatusFailure
ExecuteResult: TypeAlias = httpx.Response | Failure


def is_failure(result: ExecuteResult) -> bool:
    """Return ``True`` when ``result`` is one of the failure variants."""
    return isinstance(result, (TransportFailure, TimeoutFailure, StatusFailure))


def unwrap(result: ExecuteResult) -> httpx.Response:
    """Return the response carried by ``result`` or raise its failure.

    Raises:
        RequestFailedError: If ``result`` is a failure variant.
    """
    if isinstance(result, httpx.Response):
        return result
    raise result.to_exception()
