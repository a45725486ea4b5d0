"""Transport contracts the client depends on."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

RawNotificationHandler = Callable[[bytes | str], None]


@runtime_checkable
class RpcRequestLike(Protocol):
    id: Any
    method: str
    params: Any
    auth: Any
    jsonrpc: str
    is_batch: bool

    def to_dict(self) -> Any: ...
    def to_json(self) -> str: ...


@runtime_checkable
class Transport(Protocol):
    def call(self, request: RpcRequestLike, *, timeout: float | None = None) -> bytes | str: ...
    def close(self) -> None: ...


@runtime_checkable
class NotificationSubscriber(Transport, Protocol):
    """Transport that can also deliver unsolicited notifications."""

    def subscribe(self, handler: RawNotificationHandler) -> None: ...
    def unsubscribe(self) -> None: ...
