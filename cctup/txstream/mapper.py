import logging

import rlp

from cctup.txstream.classifier import classify_transaction
from cctup.txstream.constants import (
    DEFAULT_GAS_LIMIT,
    EMPTY_ACCESS_LIST,
    PLACEHOLDER_TX_HASH,
    ZERO_ADDRESS,
    ZERO_QUANTITY,
)
from cctup.txstream.exceptions import BlockInputError
from cctup.txstream.types import (
    AccessTuple,
    BigInt,
    Block,
    Raw,
    TransactionTrace,
    TxRecord,
    TxRecords,
)
from cctup.txstream.utils import to_hex

root_logger = logging.getLogger("cctup")
logger = root_logger.getChild("txstream").getChild("mapper")


def normalize_quantity(
    quantity: BigInt | None,
    field_name: str,
    tx_label: str,
    diagnostics: logging.Logger | None = None,
) -> str:
    """
    Normalizes an optional big-number field into a 0x prefixed hex string.  Absent and zero-length values
    normalize to '0x0'.  Present values are hex encoded byte for byte, leading zeros included.

    :param quantity: Optional BigInt wrapper from the trace
    :param field_name: Name of the field, used in diagnostics
    :param tx_label: Hex transaction hash, used in diagnostics
    :param diagnostics: Logger receiving diagnostics
    :return:
    """
    if quantity is None:
        (diagnostics or logger).debug(f"Transaction {tx_label} missing {field_name}, using {ZERO_QUANTITY}")
        return ZERO_QUANTITY

    if not quantity.data:
        return ZERO_QUANTITY

    return to_hex(quantity.data)


def normalize_gas_limit(gas_limit: int, tx_label: str, diagnostics: logging.Logger | None = None) -> str:
    """Returns the gas limit as a decimal string, substituting the intrinsic transaction cost for zero"""
    if gas_limit > 0:
        return str(gas_limit)

    (diagnostics or logger).warning(f"Transaction {tx_label} has zero gas_limit, using {DEFAULT_GAS_LIMIT}")
    return str(DEFAULT_GAS_LIMIT)


def encode_access_list(access_list: list[AccessTuple]) -> str:
    """
    Encodes an access list as 0x prefixed RLP, using the EIP-2930 layout
    ``[[address, [storage_key, ...]], ...]``.  An empty access list encodes to '0x'.
    """
    if not access_list:
        return EMPTY_ACCESS_LIST

    return to_hex(rlp.encode([[entry.address, list(entry.storage_keys)] for entry in access_list]))


def decode_access_list(access_list: str) -> list[AccessTuple]:
    """Inverse of encode_access_list"""
    if access_list in (EMPTY_ACCESS_LIST, ""):
        return []

    return [
        AccessTuple(address=address, storage_keys=list(storage_keys))
        for address, storage_keys in rlp.decode(bytes.fromhex(access_list[2:]))
    ]


def map_transaction(trace: TransactionTrace, diagnostics: logging.Logger | None = None) -> TxRecord:
    """
    Builds the output record for a single transaction trace.  Missing or malformed fields are replaced with
    fallback values and reported to the diagnostics logger, never raised.

    :param trace: Transaction trace to normalize
    :param diagnostics: Logger receiving fallback warnings.  Defaults to the module logger
    :return: TxRecord with ``decoded`` left unset
    """
    log = diagnostics or logger

    if trace.hash:
        tx_id = trace.hash
    else:
        log.warning(f"Transaction at index {trace.index} has empty hash, using placeholder")
        tx_id = PLACEHOLDER_TX_HASH

    tx_label = to_hex(tx_id)

    if trace.from_address:
        from_address = trace.from_address
    else:
        log.warning(f"Transaction {tx_label} has empty from address")
        from_address = ZERO_ADDRESS

    raw = Raw(
        from_address=from_address,
        to=trace.to.encode() if isinstance(trace.to, str) else trace.to,
        value=normalize_quantity(trace.value, "value", tx_label, log),
        gas_limit=normalize_gas_limit(trace.gas_limit, tx_label, log),
        gas_price=normalize_quantity(trace.gas_price, "gas_price", tx_label, log),
        max_fee_per_gas=normalize_quantity(trace.max_fee_per_gas, "max_fee_per_gas", tx_label, log),
        max_priority_fee_per_gas=normalize_quantity(
            trace.max_priority_fee_per_gas, "max_priority_fee_per_gas", tx_label, log
        ),
        access_list=encode_access_list(trace.access_list),
        data=trace.input,
        tx_type=trace.type,
    )

    return TxRecord(
        id=tx_id,
        kind=str(classify_transaction(trace, log)),
        raw=raw,
        decoded=None,
    )


def map_transactions(block: Block | None, diagnostics: logging.Logger | None = None) -> TxRecords:
    """
    Maps every transaction trace in a block to a TxRecord, preserving block order.  Produces exactly one
    record per trace.

    :param block: Decoded block from the indexing runtime
    :param diagnostics: Logger receiving per-transaction diagnostics.  Defaults to the module logger
    :return: TxRecords
    """
    if block is None:
        raise BlockInputError("No block supplied to map_transactions")

    records = TxRecords()
    for trace in block.transaction_traces:
        records.records.append(map_transaction(trace, diagnostics))

    (diagnostics or logger).debug(f"Mapped {len(records)} transactions for block {block.number}")
    return records
