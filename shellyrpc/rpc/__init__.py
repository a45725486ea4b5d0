"""JSON-RPC 2.0 engine: request building, parsing, batching, notifications and auth."""

from .auth import (
    AuthMethod,
    basic_auth,
    calculate_digest_response,
    calculate_ha1,
    digest_auth,
    digest_auth_from_ha1,
    validate_auth_data,
)
from .batch import Batch, BatchCall, BatchResult
from .client import Client
from .contracts import NotificationSubscriber, RpcRequestLike, Transport
from .notify import NotificationRouter
from .protocol import (
    JSONRPC_VERSION,
    AuthData,
    BatchResponse,
    ErrorObject,
    Notification,
    Request,
    RequestId,
    Response,
    ids_equal,
)
from .request import BatchRequest, RequestBuilder
from .response import parse_batch_response, parse_message, parse_notification, parse_request, parse_response

__all__ = [
    "JSONRPC_VERSION",
    "AuthData",
    "AuthMethod",
    "Batch",
    "BatchCall",
    "BatchRequest",
    "BatchResponse",
    "BatchResult",
    "Client",
    "ErrorObject",
    "Notification",
    "NotificationRouter",
    "NotificationSubscriber",
    "Request",
    "RequestBuilder",
    "RequestId",
    "Response",
    "RpcRequestLike",
    "Transport",
    "basic_auth",
    "calculate_digest_response",
    "calculate_ha1",
    "digest_auth",
    "digest_auth_from_ha1",
    "ids_equal",
    "parse_batch_response",
    "parse_message",
    "parse_notification",
    "parse_request",
    "parse_response",
    "validate_auth_data",
]
