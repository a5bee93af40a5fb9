import json

import pytest

from cctup.txstream import sources
from cctup.txstream.exceptions import BlockInputError, RPCError
from cctup.txstream.mapper import map_transactions
from cctup.txstream.sources import (
    fetch_block,
    flatten_call_frames,
    load_block_file,
    parse_rpc_block,
)
from cctup.txstream.types import BigInt

LEGACY_TX = {
    "hash": "0xc80bc9848eaa50ab54d4abee62870f2f68e189a1cc486479b1a16b93a4ea23cc",
    "from": "0xa6cc3c2531fdaa6ae1a3ca84c2855806728693e8",
    "to": "0x514910771af9ca656af840dff83e8264ecf986ca",
    "input": "0xa9059cbb00000000000000000000000057c1e0c2adf6eecdb135bcf9ec5f23b319be2c94"
    "0000000000000000000000000000000000000000000000e9cff2c7dd6572495e",
    "value": "0x0",
    "gas": "0x24465",
    "gasPrice": "0x4a817c800",
    "nonce": "0x1f",
    "transactionIndex": "0x0",
    "type": "0x0",
}
CREATION_TX = {
    "hash": "0x1b75b316f7df1d4ab9f3686180c1147cf015af42885d8e7b5fe2ea079834c606",
    "from": "0xa6cc3c2531fdaa6ae1a3ca84c2855806728693e8",
    "to": None,
    "input": "0x6080604052",
    "value": "0x0",
    "gas": "0x1e8480",
    "gasPrice": "0x3b9aca00",
    "maxFeePerGas": "0x77359400",
    "maxPriorityFeePerGas": "0x3b9aca00",
    "accessList": [
        {
            "address": "0x514910771af9ca656af840dff83e8264ecf986ca",
            "storageKeys": ["0x0000000000000000000000000000000000000000000000000000000000000001"],
        }
    ],
    "nonce": "0x20",
    "transactionIndex": "0x1",
    "type": "0x2",
}
BLOCK_JSON = {
    "number": "0xf775a2",
    "hash": "0x3a095054a69b74031cefb69117589868a710c510c2d74e5642890a30f7cb2570",
    "transactions": [LEGACY_TX, CREATION_TX],
}
TRANSFER_FRAME = {
    "type": "CALL",
    "from": LEGACY_TX["from"],
    "to": LEGACY_TX["to"],
    "value": "0x0",
    "gas": "0x24465",
    "input": LEGACY_TX["input"],
    "calls": [
        {
            "type": "DELEGATECALL",
            "from": LEGACY_TX["to"],
            "to": "0x0000000000000000000000000000000000000004",
            "gas": "0x100",
            "input": "0x",
            "calls": [
                {
                    "type": "STATICCALL",
                    "from": "0x0000000000000000000000000000000000000004",
                    "to": "0x0000000000000000000000000000000000000001",
                    "gas": "0x10",
                    "input": "0x",
                }
            ],
        },
        {"type": "CALL", "from": LEGACY_TX["to"], "to": LEGACY_TX["from"], "value": "0x1", "gas": "0x8fc"},
    ],
}


def test_parse_rpc_block():
    block = parse_rpc_block(BLOCK_JSON, [{"txHash": LEGACY_TX["hash"], "result": TRANSFER_FRAME}, {"calls": []}])

    assert block.number == 16217506
    assert len(block.transaction_traces) == 2

    legacy, creation = block.transaction_traces
    assert legacy.hash == bytes.fromhex(LEGACY_TX["hash"][2:])
    assert legacy.to == bytes.fromhex(LEGACY_TX["to"][2:])
    assert legacy.value == BigInt(data=b"")
    assert legacy.gas_price == BigInt(data=bytes.fromhex("04a817c800"))
    assert legacy.max_fee_per_gas is None
    assert legacy.gas_limit == 0x24465
    assert legacy.nonce == 31
    assert len(legacy.calls) == 3

    assert creation.to == b""
    assert creation.type == 2
    assert creation.index == 1
    assert creation.max_priority_fee_per_gas == BigInt(data=bytes.fromhex("3b9aca00"))
    assert creation.access_list[0].storage_keys == [b"\x00" * 31 + b"\x01"]
    assert creation.calls == []


def test_flatten_call_frames():
    calls = flatten_call_frames(TRANSFER_FRAME)

    assert [(c.index, c.parent_index, c.depth, c.call_type) for c in calls] == [
        (1, 0, 1, "DELEGATECALL"),
        (2, 1, 2, "STATICCALL"),
        (3, 0, 1, "CALL"),
    ]
    assert calls[2].value == BigInt(data=b"\x01")
    assert calls[0].value is None
    assert flatten_call_frames(None) == []
    assert flatten_call_frames({"type": "CALL"}) == []


def test_parsed_block_classification():
    block = parse_rpc_block(BLOCK_JSON, [TRANSFER_FRAME, {"calls": []}])
    records = map_transactions(block)

    assert [r.kind for r in records.records] == ["contractCallWithData", "contractCreation"]
    assert records.records[0].raw.value == "0x0"
    assert records.records[0].raw.gas_price == "0x04a817c800"
    assert records.records[1].raw.max_fee_per_gas == "0x77359400"


def test_missing_traces_leave_calls_empty(caplog):
    block = parse_rpc_block(BLOCK_JSON, [TRANSFER_FRAME])

    assert len(block.transaction_traces[0].calls) == 3
    assert block.transaction_traces[1].calls == []
    assert "2 transactions but 1 call traces" in caplog.text


@pytest.mark.parametrize(
    "block_json",
    [None, [], {"number": "0x1"}, {"transactions": ["0xc80bc9848eaa50ab54d4abee62870f2f68e189a1cc486479b1a16b93"]}],
)
def test_unreadable_block_json(block_json):
    with pytest.raises(BlockInputError):
        parse_rpc_block(block_json)


def test_load_block_file(tmp_path):
    bare_file = tmp_path / "bare.json"
    bare_file.write_text(json.dumps(BLOCK_JSON))
    traced_file = tmp_path / "traced.json"
    traced_file.write_text(json.dumps({"block": BLOCK_JSON, "traces": [TRANSFER_FRAME, None]}))

    assert load_block_file(bare_file).transaction_traces[0].calls == []
    assert len(load_block_file(traced_file).transaction_traces[0].calls) == 3


def test_load_block_file_errors(tmp_path):
    invalid_file = tmp_path / "invalid.json"
    invalid_file.write_text("{not json")

    with pytest.raises(BlockInputError):
        load_block_file(invalid_file)
    with pytest.raises(BlockInputError):
        load_block_file(tmp_path / "missing.json")


class _MockResponse:
    def __init__(self, payload):
        self.payload = payload

    def json(self):
        return self.payload


def test_fetch_block(monkeypatch):
    requested_methods = []

    def _mock_post(url, json, timeout):  # pylint: disable=redefined-outer-name
        requested_methods.append(json["method"])
        assert url == "http://localhost:8545"
        assert json["params"][0] == "0xf775a2"
        if json["method"] == "eth_getBlockByNumber":
            return _MockResponse({"jsonrpc": "2.0", "id": 1, "result": BLOCK_JSON})
        return _MockResponse({"jsonrpc": "2.0", "id": 1, "result": [{"result": TRANSFER_FRAME}, {"result": {}}]})

    monkeypatch.setattr(sources.requests, "post", _mock_post)

    block = fetch_block("http://localhost:8545", 16217506)

    assert requested_methods == ["eth_getBlockByNumber", "debug_traceBlockByNumber"]
    assert len(block.transaction_traces[0].calls) == 3

    requested_methods.clear()
    fetch_block("http://localhost:8545", 16217506, with_traces=False)
    assert requested_methods == ["eth_getBlockByNumber"]


def test_fetch_block_errors(monkeypatch):
    monkeypatch.setattr(
        sources.requests,
        "post",
        lambda url, json, timeout: _MockResponse({"jsonrpc": "2.0", "id": 1, "error": {"code": -32601}}),
    )
    with pytest.raises(RPCError):
        fetch_block("http://localhost:8545", 1)

    monkeypatch.setattr(
        sources.requests, "post", lambda url, json, timeout: _MockResponse({"jsonrpc": "2.0", "id": 1, "result": None})
    )
    with pytest.raises(BlockInputError):
        fetch_block("http://localhost:8545", 1)
