from dataclasses import dataclass, field

# pylint: disable=too-many-instance-attributes


@dataclass(slots=True)
class BigInt:
    """Big-endian unsigned integer as emitted by the chain client.  Zero is represented by empty bytes"""

    data: bytes = b""

    def to_int(self) -> int:
        """Returns the integer value of the wrapped bytes"""
        return int.from_bytes(self.data, "big")


@dataclass(slots=True)
class AccessTuple:
    """EIP-2930 access list entry"""

    address: bytes
    storage_keys: list[bytes] = field(default_factory=list)


@dataclass(slots=True)
class Call:
    """Internal call frame executed during a transaction"""

    index: int
    parent_index: int
    depth: int
    call_type: str
    caller: bytes
    address: bytes
    value: BigInt | None = None
    gas_limit: int = 0
    input: bytes = b""


@dataclass(slots=True)
class TransactionTrace:
    """
    Execution record of a single transaction as observed by the chain client.

    Every byte-valued field may be empty.  ``to`` is usually raw address bytes, but some sources deliver it as
    0x prefixed hex text, either as a str or as the ascii bytes of that string.
    """

    hash: bytes = b""
    from_address: bytes = b""
    to: bytes | str = b""
    input: bytes = b""

    value: BigInt | None = None
    gas_limit: int = 0
    gas_price: BigInt | None = None
    max_fee_per_gas: BigInt | None = None
    max_priority_fee_per_gas: BigInt | None = None

    access_list: list[AccessTuple] = field(default_factory=list)
    type: int = 0
    calls: list[Call] = field(default_factory=list)

    nonce: int = 0
    index: int = 0


@dataclass(slots=True)
class Block:
    """Decoded block delivered by the indexing runtime"""

    number: int
    hash: bytes = b""
    transaction_traces: list[TransactionTrace] = field(default_factory=list)
