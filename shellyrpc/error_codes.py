"""Device error-code catalog.

The protocol layer never imports this module; the client injects
``DEFAULT_ERROR_CODES`` (or a caller-supplied table) into the parsers.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum


class ErrorKind(Enum):
    """Normalized domain kinds for device RPC errors."""
    NOT_FOUND = "not_found"
    AUTH = "auth"
    TIMEOUT = "timeout"
    NOT_SUPPORTED = "not_supported"
    INVALID_PARAM = "invalid_param"
    DEVICE_OFFLINE = "device_offline"
    RPC_METHOD = "rpc_method"


# Device firmware codes.
ERR_CODE_COMPONENT_NOT_FOUND = -101
ERR_CODE_COMPONENT_CONFIG_NOT_SET = -102
ERR_CODE_INVALID_ARGUMENT = -103
ERR_CODE_DEADLINE_EXCEEDED = -104
ERR_CODE_NOT_FOUND = -105
ERR_CODE_METHOD_NOT_FOUND = -106
ERR_CODE_INVALID_METHOD_PARAM = -107
ERR_CODE_RESOURCE_EXHAUSTED = -108
ERR_CODE_FAILED_PRECONDITION = -109
ERR_CODE_UNAVAILABLE = -114
ERR_CODE_UNAUTHORIZED = -115


DEFAULT_ERROR_CODES: Mapping[int, ErrorKind] = {
    ERR_CODE_NOT_FOUND: ErrorKind.NOT_FOUND,
    ERR_CODE_COMPONENT_NOT_FOUND: ErrorKind.NOT_FOUND,
    ERR_CODE_UNAUTHORIZED: ErrorKind.AUTH,
    ERR_CODE_DEADLINE_EXCEEDED: ErrorKind.TIMEOUT,
    ERR_CODE_METHOD_NOT_FOUND: ErrorKind.NOT_SUPPORTED,
    ERR_CODE_COMPONENT_CONFIG_NOT_SET: ErrorKind.NOT_SUPPORTED,
    ERR_CODE_INVALID_ARGUMENT: ErrorKind.INVALID_PARAM,
    ERR_CODE_INVALID_METHOD_PARAM: ErrorKind.INVALID_PARAM,
    ERR_CODE_UNAVAILABLE: ErrorKind.DEVICE_OFFLINE,
    # JSON-RPC 2.0 reserved codes
    -32600: ErrorKind.INVALID_PARAM,
    -32601: ErrorKind.NOT_SUPPORTED,
    -32602: ErrorKind.INVALID_PARAM,
    -32603: ErrorKind.RPC_METHOD,
    # HTTP status codes surfaced by some gateways
    404: ErrorKind.NOT_FOUND,
    401: ErrorKind.AUTH,
    403: ErrorKind.AUTH,
}


def map_error_code(code: int, table: Mapping[int, ErrorKind] | None = None) -> ErrorKind:
    """Map an RPC error code to its domain kind; unknown codes are RPC_METHOD."""
    lookup = DEFAULT_ERROR_CODES if table is None else table
    return lookup.get(code, ErrorKind.RPC_METHOD)
