"""Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides:
- A recording SessionListener for asserting on what a display would see
- Helpers for building event-stream bodies
- A fake debate server built on httpx.MockTransport
"""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from config.settings import ServerConfig
from debate_client.api import CompletionResult, DebateApiClient
from debate_client.listener import SessionListener
from debate_client.models import Message, ScoreBoard, Session, StreamingBuffer
from debate_client.session import SessionContext
from debate_client.types import SessionStatus


# =============================================================================
# SHARED FIXTURES - Available to all test modules
# =============================================================================


class RecordingListener(SessionListener):
    """Listener that remembers every notification it receives."""

    def __init__(self) -> None:
        self.messages: list[Message] = []
        self.streaming: list[str] = []
        self.statuses: list[SessionStatus] = []
        self.rounds: list[int] = []
        self.scores: list[tuple[float, float]] = []
        self.ticks: list[int] = []
        self.errors: list[str] = []
        self.completed: list[CompletionResult | None] = []

    def on_message(self, message: Message) -> None:
        self.messages.append(message)

    def on_streaming(self, buffer: StreamingBuffer) -> None:
        self.streaming.append(buffer.content)

    def on_status_changed(self, status: SessionStatus) -> None:
        self.statuses.append(status)

    def on_round_changed(self, round_number: int) -> None:
        self.rounds.append(round_number)

    def on_scores_changed(self, board: ScoreBoard) -> None:
        self.scores.append((board.affirmative_total, board.negative_total))

    def on_timer_tick(self, remaining: int) -> None:
        self.ticks.append(remaining)

    def on_error(self, message: str) -> None:
        self.errors.append(message)

    def on_completed(self, result: CompletionResult | None) -> None:
        self.completed.append(result)


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def context() -> SessionContext:
    """An in-progress session context with five rounds."""
    return SessionContext(session=Session(id="s1", status=SessionStatus.IN_PROGRESS))


@pytest.fixture
def sse() -> Callable[..., bytes]:
    """Build a stream body from (event_type, payload) pairs."""

    def build(*events: tuple[str, dict[str, Any]]) -> bytes:
        return "".join(
            f"event: {name}\ndata: {json.dumps(payload)}\n\n" for name, payload in events
        ).encode("utf-8")

    return build


class FakeDebateServer:
    """Routes requests to canned responses and records what was sent.

    ``routes`` maps ``(method, path)`` to either a ``httpx.Response`` or a
    callable taking the request and returning one. An async callable is
    awaited by the transport, so a route can stay in flight for a while.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, response: Any) -> None:
        self.routes[(method, path)] = response

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def handler(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        if callable(route):
            return route(request)
        return route


@pytest.fixture
def server() -> FakeDebateServer:
    return FakeDebateServer()


@pytest.fixture
def make_api(server: FakeDebateServer) -> Callable[[], DebateApiClient]:
    """Factory for an API client talking to the fake server.

    The client must be created inside the running event loop.
    """

    def build() -> DebateApiClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(server.handler))
        return DebateApiClient(ServerConfig(base_url="http://debate.test"), client)

    return build


# =============================================================================
# PYTEST CONFIGURATION HOOKS
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that drive a full session against the fake server"
    )
