from .ethereum import AccessTuple, BigInt, Block, Call, TransactionTrace
from .records import Decoded, Raw, TransactionKind, TxRecord, TxRecords

__all__ = [
    "AccessTuple",
    "BigInt",
    "Block",
    "Call",
    "TransactionTrace",
    "Decoded",
    "Raw",
    "TransactionKind",
    "TxRecord",
    "TxRecords",
]
