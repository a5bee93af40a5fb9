import json
import logging
from pathlib import Path
from typing import Any

import requests

from cctup.txstream.exceptions import BlockInputError, RPCError
from cctup.txstream.types import AccessTuple, BigInt, Block, Call, TransactionTrace
from cctup.txstream.utils import quantity_to_bytes, to_bytes

root_logger = logging.getLogger("cctup")
logger = root_logger.getChild("txstream").getChild("sources")

# pylint: disable=raise-missing-from


def _optional_quantity(tx: dict[str, Any], key: str) -> BigInt | None:
    if tx.get(key) is None:
        return None
    return BigInt(data=quantity_to_bytes(tx[key]))


def _int_quantity(value: str | int | None) -> int:
    if value is None:
        return 0
    return int(value, 16) if isinstance(value, str) else value


def flatten_call_frames(root_frame: dict[str, Any] | None) -> list[Call]:
    """
    Flattens a callTracer frame tree into a list of internal calls, depth first.  The root frame is the
    transaction itself and is not included.

    :param root_frame: callTracer result for a single transaction
    :return: list of Call dataclasses ordered by execution
    """
    if not root_frame:
        return []

    calls: list[Call] = []

    def _walk(frame: dict[str, Any], parent_index: int, depth: int):
        for child in frame.get("calls") or []:
            call = Call(
                index=len(calls) + 1,
                parent_index=parent_index,
                depth=depth,
                call_type=child.get("type", "CALL").upper(),
                caller=to_bytes(child.get("from")),
                address=to_bytes(child.get("to")),
                value=_optional_quantity(child, "value"),
                gas_limit=_int_quantity(child.get("gas")),
                input=to_bytes(child.get("input")),
            )
            calls.append(call)
            _walk(child, call.index, depth + 1)

    _walk(root_frame, 0, 1)
    return calls


def parse_rpc_transaction(tx: dict[str, Any], call_frame: dict[str, Any] | None = None) -> TransactionTrace:
    """
    Parses a transaction object from eth_getBlockByNumber into a TransactionTrace

    :param tx: Transaction JSON from a full-transaction block response
    :param call_frame: Optional callTracer frame for the same transaction
    :return:
    """
    return TransactionTrace(
        hash=to_bytes(tx.get("hash")),
        from_address=to_bytes(tx.get("from")),
        to=to_bytes(tx.get("to")),
        input=to_bytes(tx.get("input")),
        value=_optional_quantity(tx, "value"),
        gas_limit=_int_quantity(tx.get("gas")),
        gas_price=_optional_quantity(tx, "gasPrice"),
        max_fee_per_gas=_optional_quantity(tx, "maxFeePerGas"),
        max_priority_fee_per_gas=_optional_quantity(tx, "maxPriorityFeePerGas"),
        access_list=[
            AccessTuple(
                address=to_bytes(entry["address"]),
                storage_keys=[to_bytes(key) for key in entry.get("storageKeys", [])],
            )
            for entry in tx.get("accessList") or []
        ],
        type=_int_quantity(tx.get("type")),
        calls=flatten_call_frames(call_frame),
        nonce=_int_quantity(tx.get("nonce")),
        index=_int_quantity(tx.get("transactionIndex")),
    )


def parse_rpc_block(block_json: dict[str, Any], call_frames: list[dict[str, Any]] | None = None) -> Block:
    """
    Parses an eth_getBlockByNumber response with full transactions into a Block.  Trace results from
    debug_traceBlockByNumber are matched to transactions by position.

    :param block_json: Block JSON.  Transactions must be full objects, not hashes
    :param call_frames: debug_traceBlockByNumber callTracer results, either raw frames or
        ``{"txHash": ..., "result": frame}`` wrappers
    :return: Block
    """
    if not isinstance(block_json, dict) or not isinstance(block_json.get("transactions"), list):
        raise BlockInputError("Block JSON must be an object containing a 'transactions' list")

    transactions = block_json["transactions"]
    if any(not isinstance(tx, dict) for tx in transactions):
        raise BlockInputError("Block JSON contains transaction hashes instead of full transaction objects")

    frames: list[dict[str, Any] | None] = [
        frame.get("result", frame) if isinstance(frame, dict) else None for frame in call_frames or []
    ]
    if frames and len(frames) != len(transactions):
        logger.warning(
            f"Block {block_json.get('number')} has {len(transactions)} transactions but {len(frames)} call "
            f"traces.  Internal calls for unmatched transactions will be empty"
        )
    frames.extend([None] * (len(transactions) - len(frames)))

    return Block(
        number=_int_quantity(block_json.get("number")),
        hash=to_bytes(block_json.get("hash")),
        transaction_traces=[parse_rpc_transaction(tx, frame) for tx, frame in zip(transactions, frames)],
    )


def load_block_file(path: str | Path) -> Block:
    """
    Loads a block from a JSON file.  The file holds either a bare block, or an object of the form
    ``{"block": {...}, "traces": [...]}``

    :param path: Path to the JSON file
    :return: Block
    """
    try:
        block_data = json.loads(Path(path).read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise BlockInputError(f"Could not read block file {path}: {e}")

    if isinstance(block_data, dict) and "block" in block_data:
        return parse_rpc_block(block_data["block"], block_data.get("traces"))
    return parse_rpc_block(block_data)


def _rpc_request(json_rpc: str, method: str, params: list[Any]) -> Any:
    response = requests.post(
        json_rpc,
        json={"jsonrpc": "2.0", "id": 1, "method": method, "params": params},
        timeout=30,
    ).json()

    try:
        return response["result"]
    except KeyError:
        raise RPCError(f"Error calling {method}: {response.get('error', response)}")


def fetch_block(json_rpc: str, block_number: int, with_traces: bool = True) -> Block:
    """
    Fetches a block and its call traces from a JSON-RPC node.  Call traces require the debug namespace to be
    enabled on the node.

    :param json_rpc: RPC url
    :param block_number: Block to fetch
    :param with_traces: If False, skips debug_traceBlockByNumber.  Transactions will have no internal calls
    :return: Block
    """
    block_id = hex(block_number)
    logger.info(f"Fetching block {block_number} from {json_rpc}")

    block_json = _rpc_request(json_rpc, "eth_getBlockByNumber", [block_id, True])
    if block_json is None:
        raise BlockInputError(f"Block {block_number} not found")

    call_frames = None
    if with_traces:
        call_frames = _rpc_request(json_rpc, "debug_traceBlockByNumber", [block_id, {"tracer": "callTracer"}])

    return parse_rpc_block(block_json, call_frames)
