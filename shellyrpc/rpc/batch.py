"""Batched calls: several requests in one round-trip, correlated by id."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from loguru import logger

from shellyrpc.errors import MissingResponseError, ShellyRpcError
from shellyrpc.rpc.protocol import Request, RequestId, Response, decode_payload
from shellyrpc.rpc.request import BatchRequest
from shellyrpc.rpc.response import parse_batch_response

if TYPE_CHECKING:
    from shellyrpc.rpc.client import Client


@dataclass(slots=True)
class BatchCall:
    """The request-like value handed to the transport for a batch.

    Its wire form is the JSON array of the member requests.
    """

    requests: list[Request]

    id = None
    method = ""
    auth = None
    jsonrpc = ""
    is_batch = True

    @property
    def params(self) -> list[dict[str, Any]]:
        return self.to_dict()

    def to_dict(self) -> list[dict[str, Any]]:
        return [req.to_dict() for req in self.requests]

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


@dataclass(slots=True)
class BatchResult:
    """Outcome of one batch entry: a result or an error, never both."""

    request: BatchRequest
    result: Any = None
    error: ShellyRpcError | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def unmarshal(self, into: Any = None) -> Any:
        """Return the decoded result; raise the entry's error verbatim if it failed."""
        if self.error is not None:
            raise self.error
        return decode_payload(self.result, into, what="result")

    def __str__(self) -> str:
        if self.error is not None:
            return f"BatchResult(method={self.request.method}, error={self.error})"
        return f"BatchResult(method={self.request.method}, result={json.dumps(self.result, ensure_ascii=False)})"


class Batch:
    """Accumulates requests and executes them as one batched call.

    Example::

        results = (
            client.batch()
            .add("Switch.GetStatus", {"id": 0})
            .add("Switch.GetStatus", {"id": 1})
            .execute()
        )
    """

    def __init__(self, client: Client):
        self._client = client
        self._requests: list[BatchRequest] = []

    def add(self, method: str, params: Any = None) -> Batch:
        self._requests.append(BatchRequest(method=method, params=params))
        return self

    def add_request(self, request: BatchRequest) -> Batch:
        self._requests.append(request)
        return self

    def __len__(self) -> int:
        return len(self._requests)

    def len(self) -> int:
        return len(self._requests)

    def clear(self) -> Batch:
        self._requests = []
        return self

    def execute(self, *, timeout: float | None = None) -> list[BatchResult]:
        """Send every queued request in one transport call.

        Results come back in add order whatever order the device answered in.
        A missing or failed entry only affects its own slot; a transport
        failure or an unparseable reply fails the whole batch.
        """
        if not self._requests:
            return []

        client = self._client
        entries = list(self._requests)
        rpc_requests = client.request_builder.build_batch(entries)
        for req in rpc_requests:
            req.with_auth(client.resolve_auth())

        logger.debug("RPC batch of {} requests (ids {}..{})", len(rpc_requests), rpc_requests[0].id, rpc_requests[-1].id)
        raw = client.send(BatchCall(requests=rpc_requests), method="batch", timeout=timeout)
        batch = parse_batch_response(raw, code_table=client.code_table)

        by_id: dict[RequestId, Response] = {}
        for resp in batch:
            key = RequestId.of(resp.id)
            if key is not None and key not in by_id:
                by_id[key] = resp

        results: list[BatchResult] = []
        for entry, req in zip(entries, rpc_requests):
            resp = by_id.get(RequestId(req.id))
            if resp is None:
                results.append(BatchResult(request=entry, error=MissingResponseError(req.id, entry.method)))
            elif resp.error is not None:
                results.append(BatchResult(request=entry, error=resp.error.to_exception()))
            else:
                results.append(BatchResult(request=entry, result=resp.result))
        return results
