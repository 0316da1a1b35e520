"""
Structured Logging Utilities

Centralizes logging setup for the resilient HTTP client and its CLI. Library
modules only call ``logging.getLogger(__name__)`` and attach structured
context via ``extra={"extra_fields": {...}}``; this module decides how those
records are rendered (plain console lines or JSON) and masks secrets first.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Dict, Optional

ROOT_LOGGER_NAME = "ResilientHTTP"

_SENSITIVE_KEYS = {
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
    "api_key",
    "apikey",
    "token",
    "secret",
    "password",
}
_MASK = "***masked***"


def mask_sensitive_data(payload: Dict[str, object]) -> Dict[str, object]:
    """Remove secrets from structured payloads prior to logging.

    Args:
        payload: Arbitrary key-value pairs that may contain credentials or
            tokens copied from request headers.

    Returns:
        Copy of the payload where common secret fields are replaced with
        ``***masked***``. Nested mappings are masked recursively.

    Examples:
        >>> mask_sensitive_data({"token": "secret", "status": 200})
        {'token': '***masked***', 'status': 200}
    """
    masked: Dict[str, object] = {}
    for key, value in payload.items():
        lower = str(key).lower()
        if lower in _SENSITIVE_KEYS:
            masked[key] = _MASK
        elif isinstance(value, dict):
            masked[key] = mask_sensitive_data(value)
        elif isinstance(value, str) and "apikey=" in value.lower():
            masked[key] = _MASK
        else:
            masked[key] = value
    return masked


class JSONFormatter(logging.Formatter):
    """Formatter emitting one JSON object per record.

    Examples:
        >>> formatter = JSONFormatter()
        >>> isinstance(formatter.format(logging.makeLogRecord({'msg': 'test'})), str)
        True
    """

    def format(self, record: logging.LogRecord) -> str:
        """Serialize a logging record into a JSON line.

        ``extra_fields`` supplied by the caller are merged into the top-level
        object; secrets are masked before serialization.
        """
        now = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_obj: Dict[str, object] = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_obj.update(extra_fields)
        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(mask_sensitive_data(log_obj), default=str)


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Configure the package logger with a single managed stream handler.

    Calling this repeatedly replaces the previously managed handler rather
    than stacking duplicates; handlers added by the application are kept.

    Args:
        level: Level name (case-insensitive).
        json_output: Emit JSON lines via :class:`JSONFormatter` when true.
        stream: Destination stream (defaults to ``sys.stderr``).

    Returns:
        The configured ``ResilientHTTP`` logger.

    Examples:
        >>> setup_logging("DEBUG").name
        'ResilientHTTP'
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_resilienthttp_managed", False):
            logger.removeHandler(handler)
            handler.close()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handler._resilienthttp_managed = True  # type: ignore[attr-defined]
    logger.addHandler(handler)

    logger.propagate = True
    return logger


__all__ = ["ROOT_LOGGER_NAME", "JSONFormatter", "mask_sensitive_data", "setup_logging"]
