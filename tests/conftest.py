"""Pytest hooks and fake transports."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import pytest


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line(
        "markers",
        "concurrency: exercises multiple threads against shared state",
    )


class FakeTransport:
    """Records calls and answers through a responder callable."""

    def __init__(self, responder: Callable[[Any], Any] | None = None):
        self.calls: list[Any] = []
        self.timeouts: list[float | None] = []
        self.closed = False
        self._responder = responder or echo_result

    def call(self, request: Any, *, timeout: float | None = None) -> bytes | str:
        self.calls.append(request)
        self.timeouts.append(timeout)
        return self._responder(request)

    def close(self) -> None:
        self.closed = True


class FakeSubscriberTransport(FakeTransport):
    """FakeTransport that can also push notifications."""

    def __init__(self, responder: Callable[[Any], Any] | None = None):
        super().__init__(responder)
        self.handler: Callable[[bytes | str], None] | None = None
        self.unsubscribed = False

    def subscribe(self, handler: Callable[[bytes | str], None]) -> None:
        self.handler = handler

    def unsubscribe(self) -> None:
        self.unsubscribed = True
        self.handler = None

    def push(self, payload: Any) -> None:
        assert self.handler is not None
        self.handler(payload if isinstance(payload, (bytes, str)) else json.dumps(payload))


def echo_result(request: Any) -> str:
    """Answer a single request with its own method and params as the result."""
    return json.dumps({"jsonrpc": "2.0", "id": request.id, "result": {"method": request.method, "params": request.params}})


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def subscriber_transport() -> FakeSubscriberTransport:
    return FakeSubscriberTransport()


@pytest.fixture
def make_transport() -> Callable[..., FakeTransport]:
    """Factory for FakeTransport with a custom responder."""
    return FakeTransport


@pytest.fixture
def make_subscriber_transport() -> Callable[..., FakeSubscriberTransport]:
    """Factory for FakeSubscriberTransport with a custom responder."""
    return FakeSubscriberTransport
