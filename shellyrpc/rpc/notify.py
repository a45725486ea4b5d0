"""Routing of server-initiated notifications to registered handlers."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from loguru import logger

from shellyrpc.rpc.protocol import Notification
from shellyrpc.rpc.response import parse_notification

NotificationHandler = Callable[[str, Any], None]
MethodNotificationHandler = Callable[[Any], None]


class NotificationRouter:
    """Dispatches notifications to global and per-method handlers.

    Registration, removal and dispatch may run on different threads; the
    transport's read loop usually drives :meth:`route`. Handlers run
    synchronously in registration order. By default a handler exception
    propagates to the caller of :meth:`route`; with ``isolate_handler_errors``
    it is logged and the remaining handlers still run.
    """

    def __init__(self, *, isolate_handler_errors: bool = False):
        self.isolate_handler_errors = isolate_handler_errors
        self._handlers: list[NotificationHandler] = []
        self._method_handlers: dict[str, list[MethodNotificationHandler]] = {}
        self._lock = threading.RLock()

    def on_notification(self, handler: NotificationHandler | None) -> None:
        """Register a handler called with ``(method, params)`` for every notification."""
        if handler is None:
            return
        with self._lock:
            self._handlers.append(handler)

    def on_notification_method(self, method: str, handler: MethodNotificationHandler | None) -> None:
        """Register a handler called with ``params`` for notifications of exactly ``method``."""
        if handler is None or not method:
            return
        with self._lock:
            self._method_handlers.setdefault(method, []).append(handler)

    def remove_notification_handlers(self) -> None:
        with self._lock:
            self._handlers = []

    def remove_method_handlers(self, method: str) -> None:
        with self._lock:
            self._method_handlers.pop(method, None)

    def remove_all_handlers(self) -> None:
        with self._lock:
            self._handlers = []
            self._method_handlers = {}

    def route(self, notification: Notification | None) -> None:
        if notification is None:
            return
        # Snapshot under the lock, call outside it so handlers may (un)register.
        with self._lock:
            handlers = list(self._handlers)
            method_handlers = list(self._method_handlers.get(notification.method, ()))
        for handler in handlers:
            self._invoke(notification.method, handler, notification.method, notification.params)
        for method_handler in method_handlers:
            self._invoke(notification.method, method_handler, notification.params)

    def route_raw(self, data: bytes | str) -> None:
        """Parse and route; a ProtocolError propagates and nothing is dispatched."""
        self.route(parse_notification(data))

    def _invoke(self, method: str, handler: Callable[..., None], *args: Any) -> None:
        if not self.isolate_handler_errors:
            handler(*args)
            return
        try:
            handler(*args)
        except Exception:
            logger.exception("Notification handler for {} failed", method)

    def has_handlers(self) -> bool:
        with self._lock:
            return bool(self._handlers) or bool(self._method_handlers)

    def has_method_handlers(self, method: str) -> bool:
        with self._lock:
            return bool(self._method_handlers.get(method))

    def handler_count(self) -> int:
        with self._lock:
            return len(self._handlers) + sum(len(h) for h in self._method_handlers.values())

    def method_handler_count(self, method: str) -> int:
        with self._lock:
            return len(self._method_handlers.get(method, ()))

    def methods(self) -> list[str]:
        """Methods with registered handlers, in first-registration order."""
        with self._lock:
            return list(self._method_handlers)
