"""shellyrpc - JSON-RPC request/response engine for networked devices."""

from loguru import logger

from shellyrpc.errors import (
    AuthValidationError,
    MissingResponseError,
    ProtocolError,
    RpcError,
    SerializationError,
    ShellyRpcError,
    TransportError,
)
from shellyrpc.rpc import Client

__version__ = "0.1.0"

# Library default: silent until configure_logging() or logger.enable("shellyrpc").
logger.disable("shellyrpc")

__all__ = [
    "AuthValidationError",
    "Client",
    "MissingResponseError",
    "ProtocolError",
    "RpcError",
    "SerializationError",
    "ShellyRpcError",
    "TransportError",
    "__version__",
]
