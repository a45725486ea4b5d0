import json

import pytest
from pydantic import BaseModel

from shellyrpc.error_codes import ErrorKind
from shellyrpc.errors import MissingResponseError, ProtocolError, RpcError, SerializationError, TransportError
from shellyrpc.rpc.batch import BatchCall, BatchResult
from shellyrpc.rpc.client import Client
from shellyrpc.rpc.protocol import AuthData
from shellyrpc.rpc.request import BatchRequest


class SwitchStatus(BaseModel):
    id: int
    output: bool


def _answer(responses_for):
    """Build a responder that answers a BatchCall with responses_for(requests)."""

    def responder(call):
        assert isinstance(call, BatchCall)
        return json.dumps(responses_for(call.requests))

    return responder


def test_empty_batch_makes_no_transport_call(transport) -> None:
    client = Client(transport)
    assert client.batch().execute() == []
    assert transport.calls == []


def test_results_follow_add_order_despite_permuted_wire_order(make_transport) -> None:
    transport = make_transport(
        _answer(
            lambda reqs: [
                {"id": reqs[1].id, "result": {"slot": 1}},
                {"id": reqs[2].id, "result": {"slot": 2}},
                {"id": reqs[0].id, "result": {"slot": 0}},
            ]
        )
    )
    client = Client(transport)
    results = (
        client.batch()
        .add("Switch.GetStatus", {"id": 0})
        .add("Switch.GetStatus", {"id": 1})
        .add("Light.GetStatus", {"id": 0})
        .execute()
    )
    assert [r.unmarshal() for r in results] == [{"slot": 0}, {"slot": 1}, {"slot": 2}]
    assert [r.request.method for r in results] == ["Switch.GetStatus", "Switch.GetStatus", "Light.GetStatus"]
    assert len(transport.calls) == 1
    assert transport.calls[0].is_batch


def test_partial_miss_isolated_to_slot(make_transport) -> None:
    transport = make_transport(_answer(lambda reqs: [{"id": reqs[1].id, "result": {"id": 1, "output": True}}]))
    client = Client(transport)
    results = client.batch().add("Switch.GetStatus", {"id": 0}).add("Switch.GetStatus", {"id": 1}).execute()

    assert results[0].is_error
    assert isinstance(results[0].error, MissingResponseError)
    assert results[0].error.method == "Switch.GetStatus"
    with pytest.raises(MissingResponseError):
        results[0].unmarshal()

    assert not results[1].is_error
    assert results[1].unmarshal(SwitchStatus) == SwitchStatus(id=1, output=True)


def test_item_rpc_error_isolated_to_slot(make_transport) -> None:
    transport = make_transport(
        _answer(
            lambda reqs: [
                {"id": reqs[0].id, "error": {"code": -105, "message": "not found"}},
                {"id": reqs[1].id, "result": None},
            ]
        )
    )
    results = Client(transport).batch().add("Switch.GetStatus", {"id": 9}).add("Sys.SetConfig").execute()
    err = results[0].error
    assert isinstance(err, RpcError)
    assert err.kind is ErrorKind.NOT_FOUND
    with pytest.raises(RpcError) as exc_info:
        results[0].unmarshal(SwitchStatus)
    assert exc_info.value is err
    assert results[1].unmarshal(SwitchStatus) is None


def test_ids_match_across_numeric_representations(make_transport) -> None:
    transport = make_transport(_answer(lambda reqs: [{"id": float(r.id), "result": r.id} for r in reversed(reqs)]))
    results = Client(transport).batch().add("A").add("B").execute()
    assert [r.unmarshal() for r in results] == [1, 2]


def test_string_id_does_not_match_numeric_request(make_transport) -> None:
    transport = make_transport(_answer(lambda reqs: [{"id": str(r.id), "result": {}} for r in reqs]))
    results = Client(transport).batch().add("A").execute()
    assert isinstance(results[0].error, MissingResponseError)


def test_batch_wire_form_is_request_array(make_transport) -> None:
    transport = make_transport(_answer(lambda reqs: [{"id": r.id, "result": {}} for r in reqs]))
    client = Client(transport)
    client.batch().add("A", {"x": 1}).add("B").execute()
    call = transport.calls[0]
    assert json.loads(call.to_json()) == [
        {"jsonrpc": "2.0", "id": 1, "method": "A", "params": {"x": 1}},
        {"jsonrpc": "2.0", "id": 2, "method": "B"},
    ]
    assert call.params == call.to_dict()
    assert call.id is None


def test_ids_are_distinct_across_batches_and_calls(make_transport) -> None:
    transport = make_transport(
        lambda call: json.dumps([{"id": r.id, "result": {}} for r in call.requests])
        if call.is_batch
        else json.dumps({"id": call.id, "result": {}})
    )
    client = Client(transport)
    client.call("Warmup")
    client.batch().add("A").add("B").execute()
    client.batch().add("C").execute()
    ids = [r.id for c in transport.calls if c.is_batch for r in c.requests]
    assert ids == [2, 3, 4]


def test_transport_failure_fails_whole_batch(make_transport) -> None:
    def fail(call):
        raise ConnectionError("device unreachable")

    with pytest.raises(TransportError) as exc_info:
        Client(make_transport(fail)).batch().add("A").add("B").execute()
    assert isinstance(exc_info.value.__cause__, ConnectionError)


def test_unparseable_reply_fails_whole_batch(make_transport) -> None:
    with pytest.raises(ProtocolError):
        Client(make_transport(lambda call: '{"id":1,"result":{}}')).batch().add("A").execute()


def test_unencodable_entry_fails_before_transport(transport) -> None:
    with pytest.raises(SerializationError):
        Client(transport).batch().add("A").add("B", object()).execute()
    assert transport.calls == []


def test_len_clear_and_reuse(make_transport) -> None:
    transport = make_transport(_answer(lambda reqs: [{"id": r.id, "result": r.method} for r in reqs]))
    batch = Client(transport).new_batch()
    batch.add("A").add_request(BatchRequest("B", {"id": 0}))
    assert len(batch) == 2
    assert batch.len() == 2
    batch.clear()
    assert batch.len() == 0
    batch.add("C")
    assert [r.unmarshal() for r in batch.execute()] == ["C"]


def test_batch_members_carry_client_auth(make_transport) -> None:
    transport = make_transport(_answer(lambda reqs: [{"id": r.id, "result": {}} for r in reqs]))
    client = Client(transport, auth=AuthData(username="admin", password="pw"))
    client.batch().add("A").add("B").execute()
    assert all(r.auth == AuthData(username="admin", password="pw") for r in transport.calls[0].requests)


def test_batch_result_str() -> None:
    ok = BatchResult(request=BatchRequest("A"), result={"x": 1})
    bad = BatchResult(request=BatchRequest("B"), error=MissingResponseError(3, "B"))
    assert str(ok) == 'BatchResult(method=A, result={"x": 1})'
    assert str(bad) == "BatchResult(method=B, error=[MISSING_RESPONSE] no response for request ID 3)"


def test_execute_passes_timeout(transport) -> None:
    transport._responder = _answer(lambda reqs: [{"id": r.id, "result": {}} for r in reqs])
    Client(transport, timeout=3.0).batch().add("A").execute(timeout=0.5)
    Client(transport, timeout=3.0).batch().add("A").execute()
    assert transport.timeouts == [0.5, 3.0]


def test_item_with_result_and_error_keeps_other_slots(make_transport) -> None:
    transport = make_transport(
        _answer(
            lambda reqs: [
                {"id": reqs[0].id, "result": {"id": 0, "output": True}},
                {"id": reqs[1].id, "result": {}, "error": {"code": -103, "message": "Invalid argument"}},
            ]
        )
    )
    results = Client(transport).batch().add("Switch.GetStatus", {"id": 0}).add("Switch.Set", {"id": "x"}).execute()
    assert results[0].unmarshal(SwitchStatus) == SwitchStatus(id=0, output=True)
    assert results[1].is_error
    assert results[1].result is None
    assert results[1].error.kind is ErrorKind.INVALID_PARAM
