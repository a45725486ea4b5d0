"""Request construction with per-builder sequential identifiers."""

from __future__ import annotations

import itertools
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from pydantic_core import PydanticSerializationError, to_jsonable_python

from shellyrpc.errors import SerializationError
from shellyrpc.rpc.protocol import Request


@dataclass(slots=True)
class BatchRequest:
    """A method/params pair queued for a batch, before an id is assigned."""

    method: str
    params: Any = None


def encode_params(method: str, params: Any) -> Any:
    """Normalize params to JSON-compatible values, or raise SerializationError.

    Accepts anything pydantic can serialize (dicts, lists, dataclasses, models,
    enums, datetimes). None means "no params".
    """
    if params is None:
        return None
    try:
        return to_jsonable_python(params)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise SerializationError(f"failed to encode params for {method}: {exc}", method=method) from exc


class RequestBuilder:
    """Builds requests with a monotonically increasing id starting at 1.

    The counter belongs to this builder, so independent clients never share an
    id sequence. It is safe to use from several threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ticker = itertools.count(1)
        self._current = 0

    def next_id(self) -> int:
        with self._lock:
            self._current = next(self._ticker)
            return self._current

    def current_id(self) -> int:
        """Last issued id, without incrementing (0 before the first build)."""
        with self._lock:
            return self._current

    def reset_id(self) -> None:
        """Restart the sequence at 1. Only meant for deterministic tests."""
        with self._lock:
            self._ticker = itertools.count(1)
            self._current = 0

    def build(self, method: str, params: Any = None) -> Request:
        # Encode first so a failed build does not consume an id.
        encoded = encode_params(method, params)
        return Request(method=method, id=self.next_id(), params=encoded)

    def build_with_id(self, request_id: Any, method: str, params: Any = None) -> Request:
        return Request(method=method, id=request_id, params=encode_params(method, params))

    def build_notification(self, method: str, params: Any = None) -> Request:
        return Request(method=method, params=encode_params(method, params))

    def build_batch(self, entries: Iterable[BatchRequest]) -> list[Request]:
        """Build one request per entry; ids increase in input order."""
        requests: list[Request] = []
        for entry in entries:
            try:
                requests.append(self.build(entry.method, entry.params))
            except SerializationError as exc:
                raise SerializationError(
                    f"failed to build request for {entry.method}: {exc.message}",
                    method=entry.method,
                ) from exc
        return requests
