"""Parsing and classification of wire payloads.

Responses and notifications tolerate a missing ``jsonrpc`` tag because some
device firmware omits it; a present tag must still be ``"2.0"``. Requests are
strict and always require the tag.
"""

from __future__ import annotations

import json
from typing import Any

from shellyrpc.errors import ProtocolError
from shellyrpc.rpc.protocol import (
    JSONRPC_VERSION,
    AuthData,
    BatchResponse,
    ErrorCodeTable,
    ErrorObject,
    Notification,
    Request,
    Response,
)

Message = Response | BatchResponse | Notification


def _text(data: bytes | bytearray | str) -> str:
    if isinstance(data, (bytes, bytearray)):
        try:
            return bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ProtocolError(f"payload is not valid UTF-8: {exc}") from exc
    return data


def _load(data: bytes | bytearray | str, what: str) -> Any:
    text = _text(data)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProtocolError(f"failed to parse {what}: {exc}", payload=text) from exc


def _check_version(row: dict[str, Any], what: str, *, required: bool = False) -> str:
    version = row.get("jsonrpc")
    if version is None or version == "":
        if required:
            raise ProtocolError(f"invalid jsonrpc version in {what}: missing")
        return ""
    if version != JSONRPC_VERSION:
        raise ProtocolError(f"invalid jsonrpc version in {what}: {version}")
    return version


def _error_from_obj(value: Any, code_table: ErrorCodeTable | None) -> ErrorObject:
    if not isinstance(value, dict):
        raise ProtocolError(f"error must be an object, got {type(value).__name__}")
    code = value.get("code")
    if isinstance(code, float) and code.is_integer():
        code = int(code)
    if not isinstance(code, int) or isinstance(code, bool):
        raise ProtocolError(f"error code must be an integer, got {code!r}")
    message = value.get("message")
    return ErrorObject(
        code=code,
        message=message if isinstance(message, str) else "",
        data=value.get("data"),
        code_table=code_table,
    )


def _response_from_obj(row: Any, code_table: ErrorCodeTable | None) -> Response:
    if not isinstance(row, dict):
        raise ProtocolError(f"response must be an object, got {type(row).__name__}")
    version = _check_version(row, "response")
    raw_error = row.get("error")
    if raw_error is not None:
        # An error block wins; a result sent alongside it is discarded.
        error = _error_from_obj(raw_error, code_table)
        return Response(id=row.get("id"), error=error, jsonrpc=version)
    return Response(id=row.get("id"), result=row.get("result"), jsonrpc=version)


def _notification_from_obj(row: Any) -> Notification:
    if not isinstance(row, dict):
        raise ProtocolError(f"notification must be an object, got {type(row).__name__}")
    version = _check_version(row, "notification")
    method = row.get("method")
    if not isinstance(method, str) or not method:
        raise ProtocolError("method is required")
    return Notification(method=method, params=row.get("params"), jsonrpc=version)


def parse_response(data: bytes | str, *, code_table: ErrorCodeTable | None = None) -> Response:
    """Parse a single response object."""
    return _response_from_obj(_load(data, "response"), code_table)


def parse_batch_response(data: bytes | str, *, code_table: ErrorCodeTable | None = None) -> BatchResponse:
    """Parse an array of responses, keeping wire order."""
    rows = _load(data, "batch response")
    if not isinstance(rows, list):
        raise ProtocolError(f"batch response must be an array, got {type(rows).__name__}")
    return BatchResponse(responses=[_response_from_obj(row, code_table) for row in rows])


def parse_notification(data: bytes | str) -> Notification:
    """Parse a server-initiated notification."""
    return _notification_from_obj(_load(data, "notification"))


def parse_request(data: bytes | str) -> Request:
    """Parse a wire request. Unlike responses, the version tag is mandatory."""
    row = _load(data, "request")
    if not isinstance(row, dict):
        raise ProtocolError(f"request must be an object, got {type(row).__name__}")
    version = _check_version(row, "request", required=True)
    method = row.get("method")
    if not isinstance(method, str) or not method:
        raise ProtocolError("method is required")
    auth = row.get("auth")
    return Request(
        method=method,
        id=row.get("id"),
        params=row.get("params"),
        auth=AuthData.from_dict(auth) if isinstance(auth, dict) else None,
        jsonrpc=version,
    )


def parse_message(data: bytes | str, *, code_table: ErrorCodeTable | None = None) -> Message:
    """Classify a payload by shape and parse it.

    - array: batch response
    - object with an id and a result or error: single response
    - object with a method and no id: notification
    - anything else: ProtocolError
    """
    row = _load(data, "message")
    if isinstance(row, list):
        return BatchResponse(responses=[_response_from_obj(item, code_table) for item in row])
    if not isinstance(row, dict):
        raise ProtocolError(f"unknown message type: {type(row).__name__}")
    has_id = row.get("id") is not None
    if has_id and ("result" in row or row.get("error") is not None):
        return _response_from_obj(row, code_table)
    method = row.get("method")
    if not has_id and isinstance(method, str) and method:
        return _notification_from_obj(row)
    raise ProtocolError("unknown message type")
