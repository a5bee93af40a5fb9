from .classifier import classify_transaction
from .encoding import decode_tx_records, encode_tx_records
from .mapper import map_transactions

__all__ = ["classify_transaction", "map_transactions", "encode_tx_records", "decode_tx_records"]
