from dataclasses import dataclass, field
from enum import Enum

# Disabling naming check that wants enums to use UPPER_CASE
# pylint: disable=invalid-name,too-many-instance-attributes


class TransactionKind(Enum):
    """
    Semantic classification of a transaction.  Values are the strings written to ``TxRecord.kind``
    """

    contract_creation = "contractCreation"
    eth_transfer = "ethTransfer"
    eth_transfer_to_contract = "ethTransferToContract"
    contract_call_with_data = "contractCallWithData"
    # Never produced by classify_transaction, still accepted when parsing records
    contract_call_no_data = "contractCallNoData"
    precompile_call = "precompileCall"

    def __str__(self) -> str:
        return self.value

    def pretty(self):
        """Returns a pretty version of the transaction kind"""
        match self:
            case TransactionKind.eth_transfer:
                return "ETH Transfer"
            case TransactionKind.eth_transfer_to_contract:
                return "ETH Transfer to Contract"
            case _:
                return self.name.replace("_", " ").title()


@dataclass
class Raw:
    """Normalized transaction fields.  Quantities are 0x prefixed hex strings, gas_limit is a decimal string"""

    from_address: bytes
    to: bytes
    value: str
    gas_limit: str
    gas_price: str
    max_fee_per_gas: str
    max_priority_fee_per_gas: str
    access_list: str
    data: bytes
    tx_type: int


@dataclass
class Decoded:
    """ABI decoding result.  Populated by the argument decoder further down the pipeline"""

    selector: str = ""
    fn_sig: str = ""
    args: list[str] = field(default_factory=list)
    abi_source: str = ""
    args_json: str = ""


@dataclass
class TxRecord:
    """Output record for a single transaction"""

    id: bytes
    kind: str
    raw: Raw | None = None
    decoded: Decoded | None = None


@dataclass
class TxRecords:
    """Ordered records for a single block"""

    records: list[TxRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)
