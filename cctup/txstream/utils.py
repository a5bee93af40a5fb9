import json
from typing import Any

from eth_utils import encode_hex
from eth_utils import to_bytes as eth_to_bytes


def to_bytes(value: str | bytes | int | None, pad: int | None = None) -> bytes:
    """
    Converts a hex string, int, or bytes into bytes.  If pad is set, the result is left padded with zero bytes
    to the requested length.

    >>> from cctup.txstream.utils import to_bytes
    >>> to_bytes("0x1f")
    b'\\x1f'
    >>> to_bytes(None)
    b''
    >>> to_bytes("0x01", pad=4)
    b'\\x00\\x00\\x00\\x01'

    :param value: hex string (with or without 0x prefix), int, bytes, or None
    :param pad: Length in bytes to left-pad the result to
    :return:
    """
    match value:
        case None:
            result = b""
        case bytes():
            result = value
        case int():
            result = eth_to_bytes(value) if value else b""
        case str():
            result = eth_to_bytes(hexstr=value)
        case _:
            raise TypeError(f"Cannot convert {type(value)} to bytes")

    if pad and len(result) < pad:
        return result.rjust(pad, b"\x00")
    return result


def quantity_to_bytes(quantity: str | int | None) -> bytes:
    """
    Converts a JSON-RPC hex quantity into minimal big-endian bytes.  A zero quantity becomes empty bytes, which
    matches how chain clients serialize zero-valued big-number fields.

    >>> quantity_to_bytes("0x0")
    b''
    >>> quantity_to_bytes("0x5208")
    b'R\\x08'
    """
    if quantity is None:
        return b""
    number = int(quantity, 16) if isinstance(quantity, str) else quantity
    if number == 0:
        return b""
    return number.to_bytes((number.bit_length() + 7) // 8, "big")


def to_hex(value: bytes) -> str:
    """Hex encodes bytes with a 0x prefix.  Empty bytes encode as '0x'"""
    return encode_hex(value)


class HexEnabledJsonEncoder(json.JSONEncoder):
    """JSON Encoder that converts bytes to 0x prefixed hex"""

    def default(self, o: Any) -> Any:
        if isinstance(o, bytes):
            return to_hex(o)
        return json.JSONEncoder.default(self, o)
