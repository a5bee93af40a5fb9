"""
Protobuf codec for TxRecords.

The message layout mirrors ``proto/cctup.proto``.  Descriptors are built in code and registered in a private
descriptor pool, so no protoc generation step is needed.  Field numbers are part of the wire contract and
must not change.
"""
import logging

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError, Message

from cctup.txstream.exceptions import EncodingError
from cctup.txstream.types import Decoded, Raw, TxRecord, TxRecords

root_logger = logging.getLogger("cctup")
logger = root_logger.getChild("txstream").getChild("encoding")

PROTO_PACKAGE = "cctup"

_FieldProto = descriptor_pb2.FieldDescriptorProto

# (field name, field number, field type, repeated)
_SCHEMA: dict[str, list[tuple[str, int, int | str, bool]]] = {
    "TxRecords": [
        ("records", 1, "TxRecord", True),
    ],
    "TxRecord": [
        ("id", 1, _FieldProto.TYPE_BYTES, False),
        ("kind", 2, _FieldProto.TYPE_STRING, False),
        ("raw", 3, "Raw", False),
        ("decoded", 4, "Decoded", False),
    ],
    "Raw": [
        ("from", 1, _FieldProto.TYPE_BYTES, False),
        ("to", 2, _FieldProto.TYPE_BYTES, False),
        ("value", 3, _FieldProto.TYPE_STRING, False),
        ("gas_limit", 4, _FieldProto.TYPE_UINT64, False),
        ("gas_price", 5, _FieldProto.TYPE_STRING, False),
        ("max_fee_per_gas", 6, _FieldProto.TYPE_STRING, False),
        ("max_priority_fee_per_gas", 7, _FieldProto.TYPE_STRING, False),
        ("access_list", 8, _FieldProto.TYPE_STRING, False),
        ("data", 9, _FieldProto.TYPE_BYTES, False),
        ("tx_type", 10, _FieldProto.TYPE_UINT32, False),
    ],
    "Decoded": [
        ("selector", 1, _FieldProto.TYPE_STRING, False),
        ("fn_sig", 2, _FieldProto.TYPE_STRING, False),
        ("args", 3, _FieldProto.TYPE_STRING, True),
        ("abi_source", 4, _FieldProto.TYPE_STRING, False),
        ("args_json", 5, _FieldProto.TYPE_STRING, False),
    ],
}


def build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    """Builds the FileDescriptorProto equivalent to cctup.proto"""
    file_proto = descriptor_pb2.FileDescriptorProto(name="cctup.proto", package=PROTO_PACKAGE, syntax="proto3")

    for message_name, fields in _SCHEMA.items():
        message_proto = file_proto.message_type.add(name=message_name)
        for field_name, number, field_type, repeated in fields:
            field_proto = message_proto.field.add(
                name=field_name,
                number=number,
                label=_FieldProto.LABEL_REPEATED if repeated else _FieldProto.LABEL_OPTIONAL,
            )
            if isinstance(field_type, str):
                field_proto.type = _FieldProto.TYPE_MESSAGE
                field_proto.type_name = f".{PROTO_PACKAGE}.{field_type}"
            else:
                field_proto.type = field_type

    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(build_file_descriptor().SerializeToString())


def _message_class(name: str) -> type[Message]:
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PROTO_PACKAGE}.{name}"))


TxRecordsMessage = _message_class("TxRecords")
TxRecordMessage = _message_class("TxRecord")
RawMessage = _message_class("Raw")
DecodedMessage = _message_class("Decoded")


def raw_to_message(raw: Raw) -> Message:
    """Converts a Raw dataclass into its protobuf message"""
    # 'from' is a reserved word, so fields are passed as a dict
    return RawMessage(
        **{
            "from": raw.from_address,
            "to": raw.to,
            "value": raw.value,
            "gas_limit": int(raw.gas_limit),
            "gas_price": raw.gas_price,
            "max_fee_per_gas": raw.max_fee_per_gas,
            "max_priority_fee_per_gas": raw.max_priority_fee_per_gas,
            "access_list": raw.access_list,
            "data": raw.data,
            "tx_type": raw.tx_type,
        }
    )


def message_to_raw(message: Message) -> Raw:
    """Converts a protobuf Raw message into a Raw dataclass"""
    return Raw(
        from_address=getattr(message, "from"),
        to=message.to,
        value=message.value,
        gas_limit=str(message.gas_limit),
        gas_price=message.gas_price,
        max_fee_per_gas=message.max_fee_per_gas,
        max_priority_fee_per_gas=message.max_priority_fee_per_gas,
        access_list=message.access_list,
        data=message.data,
        tx_type=message.tx_type,
    )


def decoded_to_message(decoded: Decoded) -> Message:
    """Converts a Decoded dataclass into its protobuf message"""
    return DecodedMessage(
        selector=decoded.selector,
        fn_sig=decoded.fn_sig,
        args=list(decoded.args),
        abi_source=decoded.abi_source,
        args_json=decoded.args_json,
    )


def message_to_decoded(message: Message) -> Decoded:
    """Converts a protobuf Decoded message into a Decoded dataclass"""
    return Decoded(
        selector=message.selector,
        fn_sig=message.fn_sig,
        args=list(message.args),
        abi_source=message.abi_source,
        args_json=message.args_json,
    )


def tx_records_to_message(records: TxRecords) -> Message:
    """
    Converts TxRecords into a protobuf message.  Records without raw or decoded sections leave the
    corresponding message fields unset.

    :param records:
    :return: cctup.TxRecords message
    """
    message = TxRecordsMessage()
    for record in records.records:
        record_message = message.records.add(id=record.id, kind=record.kind)
        # SetInParent marks presence even when every field holds its default
        if record.raw is not None:
            record_message.raw.SetInParent()
            record_message.raw.CopyFrom(raw_to_message(record.raw))
        if record.decoded is not None:
            record_message.decoded.SetInParent()
            record_message.decoded.CopyFrom(decoded_to_message(record.decoded))
    return message


def message_to_tx_records(message: Message) -> TxRecords:
    """
    Converts a protobuf TxRecords message into dataclasses.  Unset raw and decoded fields become None.

    :param message: cctup.TxRecords message
    :return:
    """
    return TxRecords(
        records=[
            TxRecord(
                id=record.id,
                kind=record.kind,
                raw=message_to_raw(record.raw) if record.HasField("raw") else None,
                decoded=message_to_decoded(record.decoded) if record.HasField("decoded") else None,
            )
            for record in message.records
        ]
    )


def encode_tx_records(records: TxRecords) -> bytes:
    """Serializes TxRecords to protobuf wire bytes"""
    return tx_records_to_message(records).SerializeToString()


def decode_tx_records(data: bytes) -> TxRecords:
    """
    Parses protobuf wire bytes into TxRecords

    :param data: Serialized cctup.TxRecords message
    :raises EncodingError: If the payload is not a valid TxRecords message
    """
    try:
        message = TxRecordsMessage.FromString(data)
    except DecodeError as e:
        logger.debug(f"Failed to parse {len(data)} byte TxRecords payload: {e}")
        raise EncodingError(f"Invalid TxRecords payload: {e}") from e

    return message_to_tx_records(message)
