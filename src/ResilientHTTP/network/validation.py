"""Status-code acceptance for final responses."""

from __future__ import annotations

import httpx

from ResilientHTTP.errors import StatusFailure
from ResilientHTTP.network.policy import SUCCESS_STATUS_MAX, SUCCESS_STATUS_MIN


def is_success_status(status: int) -> bool:
    return SUCCESS_STATUS_MIN <= status < SUCCESS_STATUS_MAX


def validate_response(
    request: httpx.Request, response: httpx.Response
) -> httpx.Response | StatusFailure:
    """Accept 2xx responses; turn anything else into a :class:`StatusFailure`.

    Runs exactly once per execute call, after retries and the deadline have
    produced a final transport-level response. Non-2xx responses are never
    retried.
    """
    if is_success_status(response.status_code):
        return response
    return StatusFailure(
        request=request,
        response=response,
        description=f"Request failed with status {response.status_code}",
    )


__all__ = ["is_success_status", "validate_response"]
