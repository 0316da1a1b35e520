"""
Pytest Configuration

Adds ``src`` to ``sys.path`` so the suite runs against the working tree and
registers the shared HTTP mocking fixtures.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from tests.fixtures.http_mocking import (  # noqa: E402,F401
    http_mock,
    mock_async_client,
)


@pytest.fixture(autouse=True)
def _reset_managed_log_handlers():
    """Drop handlers installed by ``setup_logging`` after each test."""
    yield
    logger = logging.getLogger("ResilientHTTP")
    for handler in list(logger.handlers):
        if getattr(handler, "_resilienthttp_managed", False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)
