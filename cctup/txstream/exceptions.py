class BlockInputError(Exception):
    """

    Raised when the block handed to the mapper is absent or unreadable.  This is the only condition that
    fails a whole invocation; malformed transactions inside a readable block are repaired, not raised.

    """


class RPCError(Exception):
    """Raised when a JSON-RPC node returns an error, or a response missing the expected result"""


class EncodingError(Exception):
    """

    Raised when a serialized TxRecords payload cannot be parsed by the protobuf codec

    """
