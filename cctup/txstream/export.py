import json
from dataclasses import asdict
from typing import Any

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from cctup.txstream.classifier import resolve_target_address
from cctup.txstream.constants import ADDRESS_LENGTH, REPLAY_SCHEMA_VERSION
from cctup.txstream.mapper import decode_access_list
from cctup.txstream.types import TransactionKind, TxRecord, TxRecords
from cctup.txstream.utils import HexEnabledJsonEncoder, to_hex


def _format_address(address: bytes | None) -> ChecksumAddress | str | None:
    if not address:
        return None
    if len(address) == ADDRESS_LENGTH:
        return to_checksum_address(address)
    return to_hex(address)


def tx_record_to_replay(record: TxRecord) -> dict[str, Any]:
    """
    Converts a TxRecord into a replay transaction entry.  Contract creations are written with a null ``to``,
    and access lists are expanded back into ``{address, storageKeys}`` objects.

    :param record: Record with a raw section
    :return: Replay transaction dict
    """
    if record.raw is None:
        raise ValueError(f"Record {to_hex(record.id)} has no raw transaction data")

    raw = record.raw
    replay_tx: dict[str, Any] = {
        "id": to_hex(record.id),
        "kind": record.kind,
        "tx": {
            "type": raw.tx_type,
            "from": _format_address(raw.from_address),
            "to": None
            if record.kind == TransactionKind.contract_creation.value
            else _format_address(resolve_target_address(raw.to)),
            "value": raw.value,
            "gasLimit": int(raw.gas_limit),
            "gasPrice": raw.gas_price,
            "maxFeePerGas": raw.max_fee_per_gas,
            "maxPriorityFeePerGas": raw.max_priority_fee_per_gas,
            "accessList": [
                {
                    "address": _format_address(entry.address),
                    "storageKeys": [to_hex(key) for key in entry.storage_keys],
                }
                for entry in decode_access_list(raw.access_list)
            ],
            "data": to_hex(raw.data),
        },
    }

    if record.decoded is not None:
        replay_tx["decoded"] = {
            "selector": record.decoded.selector,
            "fnSig": record.decoded.fn_sig,
            "args": list(record.decoded.args),
            "abiSource": record.decoded.abi_source,
        }

    return replay_tx


def build_replay_document(records: TxRecords) -> dict[str, Any]:
    """Builds a replay document from a block's records"""
    return {
        "schema_version": REPLAY_SCHEMA_VERSION,
        "transactions": [tx_record_to_replay(record) for record in records.records],
    }


def tx_records_to_json(records: TxRecords, indent: int | None = 4) -> str:
    """Serializes TxRecords to JSON, hex encoding all byte fields"""
    return json.dumps([asdict(record) for record in records.records], cls=HexEnabledJsonEncoder, indent=indent)
