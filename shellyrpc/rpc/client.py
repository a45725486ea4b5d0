"""JSON-RPC client wrapping an injected transport."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from loguru import logger

from shellyrpc.error_codes import DEFAULT_ERROR_CODES
from shellyrpc.errors import ProtocolError, ShellyRpcError, TransportError, sanitize_error_message
from shellyrpc.rpc.batch import Batch
from shellyrpc.rpc.contracts import NotificationSubscriber, RpcRequestLike, Transport
from shellyrpc.rpc.notify import MethodNotificationHandler, NotificationHandler, NotificationRouter
from shellyrpc.rpc.protocol import AuthData, ErrorCodeTable, decode_payload, ids_equal
from shellyrpc.rpc.request import RequestBuilder
from shellyrpc.rpc.response import parse_notification, parse_response

if TYPE_CHECKING:
    from shellyrpc.config.schema import ClientConfig

AuthSource = AuthData | Callable[[], AuthData]


class Client:
    """Synchronous JSON-RPC client.

    Every call blocks until the transport returns; the ``timeout`` keyword is
    handed to the transport, which is the only place it is enforced. If the
    transport can push notifications, the client subscribes once here and
    routes them through :attr:`notification_router`.

    ``auth`` may be fixed :class:`AuthData` or a zero-argument callable that
    returns fresh AuthData for every request (needed for digest auth, whose
    client nonce must not be reused).
    """

    def __init__(
        self,
        transport: Transport,
        *,
        auth: AuthSource | None = None,
        code_table: ErrorCodeTable | None = DEFAULT_ERROR_CODES,
        timeout: float | None = None,
        isolate_handler_errors: bool = False,
    ):
        self._transport = transport
        self._builder = RequestBuilder()
        self._router = NotificationRouter(isolate_handler_errors=isolate_handler_errors)
        self._auth = auth
        self._code_table = code_table
        self.timeout = timeout
        self._subscribed = False

        if isinstance(transport, NotificationSubscriber):
            transport.subscribe(self._handle_notification)
            self._subscribed = True
            logger.debug("Subscribed to notifications from {}", type(transport).__name__)

    @classmethod
    def from_config(cls, transport: Transport, config: ClientConfig | None = None) -> Client:
        """Build a client from :class:`ClientConfig` (model defaults when omitted)."""
        from shellyrpc.config.schema import ClientConfig
        from shellyrpc.logging_utils import configure_logging
        from shellyrpc.rpc.auth import basic_auth

        cfg = config or ClientConfig()
        if cfg.logging.enabled:
            configure_logging(cfg.logging.level)
        auth = None
        if cfg.auth.username and cfg.auth.password:
            auth = basic_auth(cfg.auth.username, cfg.auth.password)
        return cls(
            transport,
            auth=auth,
            timeout=cfg.timeout,
            isolate_handler_errors=cfg.notifications.isolate_handler_errors,
        )

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def request_builder(self) -> RequestBuilder:
        return self._builder

    @property
    def notification_router(self) -> NotificationRouter:
        return self._router

    @property
    def code_table(self) -> ErrorCodeTable | None:
        return self._code_table

    def resolve_auth(self) -> AuthData | None:
        """AuthData to attach to the next request, or None."""
        auth = self._auth
        if auth is None or isinstance(auth, AuthData):
            return auth
        return auth()

    def set_auth(self, auth: AuthSource | None) -> None:
        self._auth = auth

    def clear_auth(self) -> None:
        self._auth = None

    def send(self, request: RpcRequestLike, *, method: str, timeout: float | None = None) -> bytes | str:
        """Make exactly one transport call; failures surface as TransportError."""
        effective = self.timeout if timeout is None else timeout
        try:
            return self._transport.call(request, timeout=effective)
        except ShellyRpcError:
            raise
        except Exception as exc:
            logger.warning("RPC transport failure for {}: {}", method, sanitize_error_message(str(exc)))
            raise TransportError(f"request failed: {exc}", method=method) from exc

    def call(self, method: str, params: Any = None, *, timeout: float | None = None) -> Any:
        """Call ``method`` and return the decoded result (None when empty).

        Raises RpcError when the device answers with an error block.
        """
        req = self._builder.build(method, params)
        req.with_auth(self.resolve_auth())
        logger.debug("RPC call {} id={}", method, req.id)

        raw = self.send(req, method=method, timeout=timeout)
        resp = parse_response(raw, code_table=self._code_table)
        if resp.id is not None and not ids_equal(resp.id, req.id):
            raise ProtocolError(f"response id {resp.id!r} does not match request id {req.id!r}")
        if resp.error is not None:
            raise resp.error.to_exception()
        return resp.result

    def call_result(self, method: str, params: Any, into: Any, *, timeout: float | None = None) -> Any:
        """Call ``method`` and validate the result into ``into`` (a type or pydantic model)."""
        return decode_payload(self.call(method, params, timeout=timeout), into, what="result")

    def notify(self, method: str, params: Any = None, *, timeout: float | None = None) -> None:
        """Send a notification; whatever the transport returns is ignored."""
        req = self._builder.build_notification(method, params)
        req.with_auth(self.resolve_auth())
        logger.debug("RPC notify {}", method)
        self.send(req, method=method, timeout=timeout)

    def new_batch(self) -> Batch:
        return Batch(self)

    def batch(self) -> Batch:
        return Batch(self)

    def on_notification(self, handler: NotificationHandler | None) -> None:
        self._router.on_notification(handler)

    def on_notification_method(self, method: str, handler: MethodNotificationHandler | None) -> None:
        self._router.on_notification_method(method, handler)

    def remove_notification_handlers(self) -> None:
        self._router.remove_notification_handlers()

    def remove_method_handlers(self, method: str) -> None:
        self._router.remove_method_handlers(method)

    def remove_all_handlers(self) -> None:
        self._router.remove_all_handlers()

    def _handle_notification(self, data: bytes | str) -> None:
        try:
            notification = parse_notification(data)
        except ProtocolError as exc:
            logger.warning("Dropping malformed notification: {}", exc.message)
            return
        self._router.route(notification)

    def close(self) -> None:
        """Unsubscribe from pushes (if subscribed) and close the transport."""
        try:
            if self._subscribed:
                self._subscribed = False
                self._transport.unsubscribe()  # type: ignore[attr-defined]
        finally:
            self._transport.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
