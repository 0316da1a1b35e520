# === NAVMAP v1 ===
# {
#   "module": "ResilientHTTP.network.policy",
#   "purpose": "HTTP policy constants and defaults.",
#   "sections": []
# }
# === /NAVMAP ===

"""HTTP policy constants and defaults.

Defines the retry budget, backoff schedule, deadline, and default headers used
by the resilient client stack when no explicit configuration is supplied.
"""

from ResilientHTTP import __version__

# ============================================================================
# Retry Budget
# ============================================================================

#: Total attempts per execute call (initial attempt + retries)
DEFAULT_MAX_ATTEMPTS = 4

#: Base delay before the first retry (seconds)
DEFAULT_INITIAL_DELAY = 1.0

#: Exponential growth factor applied per attempt
DEFAULT_BACKOFF_FACTOR = 2.0

#: Optional ceiling for a single backoff wait (None = uncapped)
DEFAULT_MAX_DELAY: float | None = None


# ============================================================================
# Deadline
# ============================================================================

#: Wall-clock budget for one execute call, spanning every attempt and backoff
DEFAULT_TIMEOUT = 15.0


# ============================================================================
# Response Acceptance
# ============================================================================

#: Inclusive lower bound of accepted status codes
SUCCESS_STATUS_MIN = 200

#: Exclusive upper bound of accepted status codes
SUCCESS_STATUS_MAX = 300


# ============================================================================
# Default Headers
# ============================================================================

#: Accept header injected when the caller did not set one
DEFAULT_ACCEPT = "application/json"

#: User-Agent template; identifies the client to upstream services
USER_AGENT_TEMPLATE = "ResilientHTTP/{version}"

DEFAULT_USER_AGENT = USER_AGENT_TEMPLATE.format(version=__version__)


__all__ = [
    # Retry
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_INITIAL_DELAY",
    "DEFAULT_BACKOFF_FACTOR",
    "DEFAULT_MAX_DELAY",
    # Deadline
    "DEFAULT_TIMEOUT",
    # Acceptance
    "SUCCESS_STATUS_MIN",
    "SUCCESS_STATUS_MAX",
    # Headers
    "DEFAULT_ACCEPT",
    "USER_AGENT_TEMPLATE",
    "DEFAULT_USER_AGENT",
]
