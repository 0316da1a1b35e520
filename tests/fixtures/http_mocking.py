# === NAVMAP v1 ===
# {
#   "module": "tests.fixtures.http_mocking",
#   "purpose": "HTTP mocking fixtures for hermetic network testing",
#   "sections": [
#     {"id": "mock-response-builder", "name": "MockResponseBuilder", "anchor": "class-mock-response-builder", "kind": "class"},
#     {"id": "scripted-transport", "name": "ScriptedTransport", "anchor": "class-scripted-transport", "kind": "class"},
#     {"id": "recording-sleep", "name": "RecordingSleep", "anchor": "class-recording-sleep", "kind": "class"},
#     {"id": "recording-hooks", "name": "RecordingHooks", "anchor": "class-recording-hooks", "kind": "class"},
#     {"id": "http-mock-fixture", "name": "http_mock", "anchor": "fixture-http-mock", "kind": "fixture"},
#     {"id": "mock-async-client-fixture", "name": "mock_async_client", "anchor": "fixture-mock-async-client", "kind": "fixture"}
#   ]
# }
# === /NAVMAP ===

"""
HTTP mocking fixtures for hermetic network testing.

Provides scripted async transports, HTTPX ``MockTransport`` clients, and
recording doubles for sleeps and lifecycle hooks so that retry and deadline
behaviour can be asserted without real network access or real waiting.
"""

from __future__ import annotations

import asyncio
import inspect
import json
from typing import Any, Callable, Generator

import httpx
import pytest


class MockResponseBuilder:
    """Builder for constructing mock HTTP responses with fluent API."""

    def __init__(self, status_code: int = 200, content: bytes = b""):
        self.status_code = status_code
        self.content = content
        self.headers: dict[str, str] = {}

    def with_status(self, code: int) -> MockResponseBuilder:
        self.status_code = code
        return self

    def with_json(self, data: dict[str, Any]) -> MockResponseBuilder:
        """Set response content as JSON."""
        self.content = json.dumps(data).encode("utf-8")
        self.headers["content-type"] = "application/json"
        return self

    def with_header(self, name: str, value: str) -> MockResponseBuilder:
        self.headers[name] = value
        return self

    def build(self) -> httpx.Response:
        return httpx.Response(
            status_code=self.status_code,
            content=self.content,
            headers=self.headers,
        )


Step = httpx.Response | BaseException | Callable[[httpx.Request], Any]


class ScriptedTransport:
    """Async transport replaying a fixed script of outcomes.

    Each ``send`` consumes the next step: a response is returned, an exception
    is raised, and a callable is invoked with the request (its result, awaited
    if needed, is returned). The last step repeats once the script runs out.
    Every received request is recorded in :attr:`requests`.
    """

    def __init__(self, *steps: Step) -> None:
        if not steps:
            raise ValueError("ScriptedTransport needs at least one step")
        self._steps = list(steps)
        self.requests: list[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def send(self, request: httpx.Request) -> httpx.Response:
        index = min(len(self.requests), len(self._steps) - 1)
        self.requests.append(request)
        step = self._steps[index]
        if isinstance(step, httpx.Response):
            return step
        if isinstance(step, BaseException):
            raise step
        result = step(request)
        if inspect.isawaitable(result):
            result = await result
        return result


class RecordingSleep:
    """Async sleep double recording requested delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


class RecordingHooks:
    """Request hooks recording ``(event, payload)`` tuples."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def on_attempt(self, request: httpx.Request, attempt_index: int) -> None:
        self.events.append(("attempt", attempt_index))

    def on_retry(
        self, request: httpx.Request, attempt_index: int, delay: float, error: BaseException
    ) -> None:
        self.events.append(("retry", (attempt_index, delay, error)))

    def on_success(self, request: httpx.Request, response: httpx.Response) -> None:
        self.events.append(("success", response.status_code))

    def on_failure(self, request: httpx.Request, failure: Any) -> None:
        self.events.append(("failure", failure))


def connect_error(message: str = "connection refused") -> httpx.ConnectError:
    return httpx.ConnectError(message, request=httpx.Request("GET", "https://example.org/"))


@pytest.fixture
def http_mock() -> Generator[Callable[..., MockResponseBuilder], None, None]:
    """
    Provide a mock HTTP response builder factory.

    Example:
        def test_http_client(http_mock):
            response = http_mock(200).with_json({"id": 1}).build()
            assert response.headers["content-type"] == "application/json"
    """

    def _mock_response(status_code: int = 200, content: bytes | str = b"") -> MockResponseBuilder:
        if isinstance(content, str):
            content = content.encode("utf-8")
        return MockResponseBuilder(status_code=status_code, content=content)

    yield _mock_response


@pytest.fixture
def mock_async_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """
    Provide a factory for ``httpx.AsyncClient`` instances backed by ``MockTransport``.

    Example:
        def test_with_mock_client(mock_async_client):
            client = mock_async_client(lambda request: httpx.Response(204))
    """

    def _factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _factory
