"""JSON-RPC 2.0 message models shared by the builder, parsers and client."""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from pydantic import TypeAdapter, ValidationError

from shellyrpc.errors import ProtocolError, RpcError

JSONRPC_VERSION = "2.0"

# Maps an integer error code to a domain error kind. Supplied by the caller so
# that this module never depends on a concrete error catalog.
ErrorCodeTable = Mapping[int, Any]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def ids_equal(a: Any, b: Any) -> bool:
    """Compare two request identifiers.

    Numbers compare by value regardless of representation (``1 == 1.0``), so an
    id issued as ``int`` still matches one decoded as ``float``. Strings only
    match strings. Booleans are never valid identifiers.
    """
    if isinstance(a, RequestId):
        a = a.value
    if isinstance(b, RequestId):
        b = b.value
    if a is None or b is None:
        return a is None and b is None
    if _is_number(a) and _is_number(b):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    return False


@dataclass(frozen=True, slots=True, eq=False)
class RequestId:
    """Hashable request identifier with numeric-normalizing equality."""

    value: int | float | str

    @classmethod
    def of(cls, value: Any) -> RequestId | None:
        """Wrap a decoded id, or return None when it cannot be an identifier."""
        if isinstance(value, RequestId):
            return value
        if _is_number(value) or isinstance(value, str):
            return cls(value)
        return None

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RequestId):
            return ids_equal(self.value, other.value)
        if _is_number(other) or isinstance(other, str):
            return ids_equal(self.value, other)
        return NotImplemented

    def __hash__(self) -> int:
        # hash(1) == hash(1.0) in Python, which matches the equality rule.
        return hash(self.value)

    def __str__(self) -> str:
        return str(self.value)


def decode_payload(value: Any, into: Any = None, *, what: str = "payload") -> Any:
    """Return a decoded payload, validated into ``into`` when a type is given."""
    if into is None or value is None:
        return value
    try:
        return TypeAdapter(into).validate_python(value)
    except ValidationError as exc:
        raise ProtocolError(f"failed to decode {what}: {exc}") from exc


@dataclass(slots=True)
class AuthData:
    """Credentials carried in a request's ``auth`` block.

    Basic shape: username and password. Digest shape: username, realm, nonce,
    cnonce, nc, algorithm and the computed response hash.
    """

    username: str = ""
    password: str = field(default="", repr=False)
    realm: str = ""
    nonce: str = ""
    cnonce: str = ""
    algorithm: str = ""
    response: str = ""
    nc: int = 0

    def to_dict(self) -> dict[str, Any]:
        row: dict[str, Any] = {}
        for key in ("username", "password", "realm", "nonce", "cnonce", "algorithm", "response"):
            value = getattr(self, key)
            if value:
                row[key] = value
        if self.nc:
            row["nc"] = self.nc
        return row

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> AuthData:
        nc = row.get("nc")
        return cls(
            username=str(row.get("username") or ""),
            password=str(row.get("password") or ""),
            realm=str(row.get("realm") or ""),
            nonce=str(row.get("nonce") or ""),
            cnonce=str(row.get("cnonce") or ""),
            algorithm=str(row.get("algorithm") or ""),
            response=str(row.get("response") or ""),
            nc=nc if isinstance(nc, int) and not isinstance(nc, bool) else 0,
        )


@dataclass(slots=True)
class Request:
    """A single JSON-RPC request. A request without an id is a notification."""

    method: str
    id: Any = None
    params: Any = None
    auth: AuthData | None = None
    jsonrpc: str = JSONRPC_VERSION

    is_batch: ClassVar[bool] = False

    @property
    def is_notification(self) -> bool:
        return self.id is None

    def with_auth(self, auth: AuthData | None) -> Request:
        self.auth = auth
        return self

    def get_params(self, into: Any = None) -> Any:
        return decode_payload(self.params, into, what="params")

    def to_dict(self) -> dict[str, Any]:
        row: dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.id is not None:
            row["id"] = self.id
        row["method"] = self.method
        if self.params is not None:
            row["params"] = self.params
        if self.auth is not None:
            row["auth"] = self.auth.to_dict()
        return row

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        if self.id is not None:
            return f"Request(id={self.id}, method={self.method})"
        return f"Notification(method={self.method})"


@dataclass(slots=True)
class ErrorObject:
    """Error block of a response."""

    code: int
    message: str = ""
    data: Any = None
    code_table: ErrorCodeTable | None = field(default=None, repr=False, compare=False)

    @property
    def kind(self) -> Any:
        """Domain kind for ``code`` from the attached table; None if unclassified."""
        if self.code_table is None:
            return None
        return self.code_table.get(self.code)

    def to_exception(self) -> RpcError:
        return RpcError(self.code, self.message, self.data, kind=self.kind)

    def to_dict(self) -> dict[str, Any]:
        row: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            row["data"] = self.data
        return row

    def __str__(self) -> str:
        if self.data is not None:
            return f"RPC error {self.code}: {self.message} (data: {json.dumps(self.data, ensure_ascii=False)})"
        return f"RPC error {self.code}: {self.message}"


@dataclass(slots=True)
class Response:
    """A single JSON-RPC response. ``jsonrpc`` is empty when the device omitted it."""

    id: Any = None
    result: Any = None
    error: ErrorObject | None = None
    jsonrpc: str = JSONRPC_VERSION

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def get_error(self) -> RpcError | None:
        if self.error is None:
            return None
        return self.error.to_exception()

    def get_result(self, into: Any = None) -> Any:
        """Return the decoded result, raising the typed RpcError if the response failed.

        An empty result is a successful no-op and returns None.
        """
        if self.error is not None:
            raise self.error.to_exception()
        return decode_payload(self.result, into, what="result")

    def to_dict(self) -> dict[str, Any]:
        row: dict[str, Any] = {}
        if self.jsonrpc:
            row["jsonrpc"] = self.jsonrpc
        row["id"] = self.id
        if self.error is not None:
            row["error"] = self.error.to_dict()
        else:
            row["result"] = self.result
        return row

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        if self.error is not None:
            return f"Response(id={self.id}, error={self.error})"
        return f"Response(id={self.id}, result={json.dumps(self.result, ensure_ascii=False)})"


@dataclass(slots=True)
class Notification:
    """Server-initiated message with no id; never correlated to a request."""

    method: str
    params: Any = None
    jsonrpc: str = JSONRPC_VERSION

    def get_params(self, into: Any = None) -> Any:
        return decode_payload(self.params, into, what="params")

    def to_dict(self) -> dict[str, Any]:
        row: dict[str, Any] = {}
        if self.jsonrpc:
            row["jsonrpc"] = self.jsonrpc
        row["method"] = self.method
        if self.params is not None:
            row["params"] = self.params
        return row

    def __str__(self) -> str:
        return f"Notification(method={self.method}, params={json.dumps(self.params, ensure_ascii=False)})"


@dataclass(slots=True)
class BatchResponse:
    """Responses of a batch call, in wire order."""

    responses: list[Response] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.responses)

    def __iter__(self) -> Iterator[Response]:
        return iter(self.responses)

    def len(self) -> int:
        return len(self.responses)

    def get(self, index: int) -> Response | None:
        if index < 0 or index >= len(self.responses):
            return None
        return self.responses[index]

    def get_by_id(self, request_id: Any) -> Response | None:
        for resp in self.responses:
            if ids_equal(resp.id, request_id):
                return resp
        return None

    def has_errors(self) -> bool:
        return any(resp.is_error for resp in self.responses)

    def errors(self) -> list[RpcError]:
        return [resp.error.to_exception() for resp in self.responses if resp.error is not None]

    def to_list(self) -> list[dict[str, Any]]:
        return [resp.to_dict() for resp in self.responses]

    def __str__(self) -> str:
        failed = sum(1 for resp in self.responses if resp.is_error)
        return f"BatchResponse(total={len(self.responses)}, success={len(self.responses) - failed}, errors={failed})"
