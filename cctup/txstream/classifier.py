import logging

from eth_utils import decode_hex

from cctup.txstream.constants import ADDRESS_LENGTH, PRECOMPILE_MAX, PRECOMPILE_MIN
from cctup.txstream.types import TransactionKind, TransactionTrace

root_logger = logging.getLogger("cctup")
logger = root_logger.getChild("txstream").getChild("classifier")

HEX_PREFIX = b"0x"


def resolve_target_address(to: bytes | str, diagnostics: logging.Logger | None = None) -> bytes | None:
    """
    Resolves the target of a transaction into raw address bytes.

    Sources deliver ``to`` either as raw bytes, or as 0x prefixed hex text (a str, or the ascii bytes of one).
    Hex text is decoded, raw bytes are returned unchanged.  Text that is not valid utf-8 or not valid hex
    resolves to None.

    >>> resolve_target_address(b"0x0000000000000000000000000000000000000004")
    b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x04'
    >>> resolve_target_address(b"0xzz") is None
    True

    :param to: Target address as raw bytes or hex text
    :param diagnostics: Logger receiving decode failures.  Defaults to the module logger
    :return: Address bytes, or None if the hex text could not be decoded
    """
    log = diagnostics or logger

    match to:
        case str():
            hex_text = to
        case bytes() if to.startswith(HEX_PREFIX):
            try:
                hex_text = to.decode("utf-8")
            except UnicodeDecodeError:
                log.debug(f"Invalid UTF-8 in to address: {to!r}")
                return None
        case _:
            return bytes(to)

    try:
        return decode_hex(hex_text)
    except ValueError:
        log.debug(f"Failed to decode hex address: {hex_text}")
        return None


def is_precompile_address(address: bytes | None) -> bool:
    """
    Checks whether an address falls in the reserved precompile range 0x...01 through 0x...09

    :param address: 20 byte address.  Addresses of any other length are never precompiles
    """
    if address is None or len(address) != ADDRESS_LENGTH:
        return False
    return not any(address[:-1]) and PRECOMPILE_MIN <= address[-1] <= PRECOMPILE_MAX


def classify_transaction(trace: TransactionTrace, diagnostics: logging.Logger | None = None) -> TransactionKind:
    """
    Classifies a transaction trace by its topology.

    Rules are applied in priority order:

        * No target address: ``contract_creation``
        * Target in the precompile range: ``precompile_call``
        * Otherwise, by whether the trace made internal calls and whether it carries calldata.  Calldata sent
          to an account without internal calls is treated as a contract call.

    ``contract_call_no_data`` is never returned.

    :param trace: Transaction trace to classify
    :param diagnostics: Logger receiving classification diagnostics.  Defaults to the module logger
    :return: TransactionKind
    """
    log = diagnostics or logger

    if not trace.to:
        return TransactionKind.contract_creation

    if is_precompile_address(resolve_target_address(trace.to, log)):
        return TransactionKind.precompile_call

    has_calls = len(trace.calls) > 0
    has_data = len(trace.input) > 0

    match has_calls, has_data:
        case True, True:
            return TransactionKind.contract_call_with_data
        case True, False:
            return TransactionKind.eth_transfer_to_contract
        case False, True:
            log.debug(f"Transaction 0x{trace.hash.hex()} has data but no contract calls")
            return TransactionKind.contract_call_with_data
        case _:
            return TransactionKind.eth_transfer
