"""
Exception hierarchy for shellyrpc.

Provides:
- Custom exception classes with error codes
- Error categorization (validation, transport, protocol, remote, not found)
- Safe error message formatting (no credential leak in logs)
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    VALIDATION = "validation"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    REMOTE = "remote"
    NOT_FOUND = "not_found"


class ShellyRpcError(Exception):
    """Base exception for all shellyrpc errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.PROTOCOL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class SerializationError(ShellyRpcError):
    """Request parameters could not be encoded; raised before any network activity."""

    def __init__(self, message: str, method: str | None = None):
        details = {"method": method} if method else {}
        super().__init__(message, code="SERIALIZATION_ERROR", category=ErrorCategory.VALIDATION, details=details)


class TransportError(ShellyRpcError):
    """The transport failed to deliver a call. The original exception is chained as __cause__."""

    def __init__(self, message: str, method: str | None = None):
        details = {"method": method} if method else {}
        super().__init__(message, code="TRANSPORT_ERROR", category=ErrorCategory.TRANSPORT, details=details)


class ProtocolError(ShellyRpcError):
    """Malformed payload, wrong version tag or missing required field."""

    def __init__(self, message: str, payload: str | None = None):
        details = {"payload": payload[:200]} if payload else {}
        super().__init__(message, code="PROTOCOL_ERROR", category=ErrorCategory.PROTOCOL, details=details)


class RpcError(ShellyRpcError):
    """Error returned by the remote device in a response's error block.

    ``kind`` is the domain error kind resolved through the error-code table the
    parser was given (``None`` when no table was supplied).
    """

    def __init__(self, rpc_code: int, rpc_message: str, data: Any = None, kind: Any = None):
        if data is not None:
            text = f"RPC error {rpc_code}: {rpc_message} (data: {data})"
        else:
            text = f"RPC error {rpc_code}: {rpc_message}"
        super().__init__(
            text,
            code="RPC_ERROR",
            category=ErrorCategory.REMOTE,
            details={"rpc_code": rpc_code, "data": data, "kind": getattr(kind, "value", kind)},
        )
        self.rpc_code = rpc_code
        self.rpc_message = rpc_message
        self.data = data
        self.kind = kind

    def is_kind(self, kind: Any) -> bool:
        return self.kind is not None and self.kind == kind

    def __str__(self) -> str:
        return self.message


class MissingResponseError(ShellyRpcError):
    """No response in a batch carried the identifier of a request."""

    def __init__(self, request_id: Any, method: str):
        super().__init__(
            f"no response for request ID {request_id}",
            code="MISSING_RESPONSE",
            category=ErrorCategory.NOT_FOUND,
            details={"request_id": request_id, "method": method},
        )
        self.request_id = request_id
        self.method = method


class AuthValidationError(ShellyRpcError, ValueError):
    """Authentication data is missing fields required by its shape."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="AUTH_VALIDATION_ERROR", category=ErrorCategory.VALIDATION, details=details)
        self.field = field


_SENSITIVE_PATTERNS = [
    re.compile(r"(password|pass|ha1|token|secret|auth)[=:]\s*['\"]?([^\s'\",}]+)['\"]?", re.IGNORECASE),
    re.compile(r"\"(password|response|cnonce)\"\s*:\s*\"[^\"]*\"", re.IGNORECASE),
    re.compile(r"basic\s+[a-zA-Z0-9+/]+=*", re.IGNORECASE),
    re.compile(r"https?://[^\s/:@]+:[^\s/@]+@"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove credentials from error messages before they are logged."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized
