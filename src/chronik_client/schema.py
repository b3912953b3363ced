"""Protobuf message classes for the Chronik wire format.

The schema is declared here as a table and registered in a private
descriptor pool, so no generated ``_pb2`` module is needed. It is the
following proto3 file::

    message BlockchainInfo { bytes tip_hash = 1; int32 tip_height = 2; }
    message ChronikInfo { optional string version = 1; }
    message Block { BlockInfo block_info = 1; }
    message Blocks { repeated BlockInfo blocks = 1; }
    message TxHistoryPage { repeated Tx txs = 1; uint32 num_pages = 2; uint32 num_txs = 3; }
    message ScriptUtxos { bytes script = 1; repeated ScriptUtxo utxos = 2; }
    message Error { string msg = 2; }
    ...

See ``_MESSAGES`` for every field.
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory


PACKAGE = "chronik"

_F = descriptor_pb2.FieldDescriptorProto

# Field modifiers
REPEATED = "repeated"
OPTIONAL = "optional"

# message name -> [(field name, number, scalar type or message name, *modifiers)]
_MESSAGES = {
    "BlockchainInfo": [
        ("tip_hash", 1, _F.TYPE_BYTES),
        ("tip_height", 2, _F.TYPE_INT32),
    ],
    "ChronikInfo": [
        ("version", 1, _F.TYPE_STRING, OPTIONAL),
    ],
    "BlockInfo": [
        ("hash", 1, _F.TYPE_BYTES),
        ("prev_hash", 2, _F.TYPE_BYTES),
        ("height", 3, _F.TYPE_INT32),
        ("n_bits", 4, _F.TYPE_UINT32),
        ("timestamp", 5, _F.TYPE_INT64),
        ("block_size", 6, _F.TYPE_UINT64),
        ("num_txs", 7, _F.TYPE_UINT64),
        ("num_inputs", 8, _F.TYPE_UINT64),
        ("num_outputs", 9, _F.TYPE_UINT64),
        ("sum_input_sats", 10, _F.TYPE_INT64),
        ("sum_coinbase_output_sats", 11, _F.TYPE_INT64),
        ("sum_normal_output_sats", 12, _F.TYPE_INT64),
        ("sum_burned_sats", 13, _F.TYPE_INT64),
        ("is_final", 14, _F.TYPE_BOOL),
    ],
    "Block": [
        ("block_info", 1, "BlockInfo"),
    ],
    "Blocks": [
        ("blocks", 1, "BlockInfo", REPEATED),
    ],
    "BlockMetadata": [
        ("height", 1, _F.TYPE_INT32),
        ("hash", 2, _F.TYPE_BYTES),
        ("timestamp", 3, _F.TYPE_INT64),
        ("is_final", 4, _F.TYPE_BOOL),
    ],
    "OutPoint": [
        ("txid", 1, _F.TYPE_BYTES),
        ("out_idx", 2, _F.TYPE_UINT32),
    ],
    "SpentBy": [
        ("txid", 1, _F.TYPE_BYTES),
        ("input_idx", 2, _F.TYPE_UINT32),
    ],
    "TxInput": [
        ("prev_out", 1, "OutPoint"),
        ("input_script", 2, _F.TYPE_BYTES),
        ("output_script", 3, _F.TYPE_BYTES),
        ("value", 4, _F.TYPE_INT64),
        ("sequence_no", 5, _F.TYPE_UINT32),
    ],
    "TxOutput": [
        ("value", 1, _F.TYPE_INT64),
        ("output_script", 2, _F.TYPE_BYTES),
        ("spent_by", 4, "SpentBy"),
    ],
    "Tx": [
        ("txid", 1, _F.TYPE_BYTES),
        ("version", 2, _F.TYPE_INT32),
        ("inputs", 3, "TxInput", REPEATED),
        ("outputs", 4, "TxOutput", REPEATED),
        ("lock_time", 5, _F.TYPE_UINT32),
        ("block", 8, "BlockMetadata"),
        ("time_first_seen", 9, _F.TYPE_INT64),
        ("size", 11, _F.TYPE_UINT32),
        ("is_coinbase", 12, _F.TYPE_BOOL),
    ],
    "TxHistoryPage": [
        ("txs", 1, "Tx", REPEATED),
        ("num_pages", 2, _F.TYPE_UINT32),
        ("num_txs", 3, _F.TYPE_UINT32),
    ],
    "RawTx": [
        ("raw_tx", 1, _F.TYPE_BYTES),
    ],
    "ScriptUtxo": [
        ("outpoint", 1, "OutPoint"),
        ("block_height", 2, _F.TYPE_INT32),
        ("is_coinbase", 3, _F.TYPE_BOOL),
        ("value", 4, _F.TYPE_INT64),
        ("is_final", 5, _F.TYPE_BOOL),
    ],
    "ScriptUtxos": [
        ("script", 1, _F.TYPE_BYTES),
        ("utxos", 2, "ScriptUtxo", REPEATED),
    ],
    "BroadcastTxRequest": [
        ("raw_tx", 1, _F.TYPE_BYTES),
        ("skip_token_checks", 2, _F.TYPE_BOOL),
    ],
    "BroadcastTxResponse": [
        ("txid", 1, _F.TYPE_BYTES),
    ],
    "BroadcastTxsRequest": [
        ("raw_txs", 1, _F.TYPE_BYTES, REPEATED),
        ("skip_token_checks", 2, _F.TYPE_BOOL),
    ],
    "BroadcastTxsResponse": [
        ("txids", 1, _F.TYPE_BYTES, REPEATED),
    ],
    "Error": [
        ("msg", 2, _F.TYPE_STRING),
    ],
}


def build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    """Build the FileDescriptorProto for the Chronik schema."""
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="chronik.proto",
        package=PACKAGE,
        syntax="proto3",
    )

    for message_name, fields in _MESSAGES.items():
        message = file_proto.message_type.add(name=message_name)
        for name, number, field_type, *modifiers in fields:
            field = message.field.add(name=name, number=number, label=_F.LABEL_OPTIONAL)

            if isinstance(field_type, str):
                field.type = _F.TYPE_MESSAGE
                field.type_name = f".{PACKAGE}.{field_type}"
            else:
                field.type = field_type

            if REPEATED in modifiers:
                field.label = _F.LABEL_REPEATED

            # proto3 `optional` is a synthetic single-field oneof
            if OPTIONAL in modifiers:
                field.proto3_optional = True
                field.oneof_index = len(message.oneof_decl)
                message.oneof_decl.add(name=f"_{name}")

    return file_proto


_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(build_file_descriptor().SerializeToString())


def message_class(name: str):
    """Get the protobuf message class for a schema message name."""
    descriptor = _POOL.FindMessageTypeByName(f"{PACKAGE}.{name}")
    return message_factory.GetMessageClass(descriptor)


BlockchainInfo = message_class("BlockchainInfo")
ChronikInfo = message_class("ChronikInfo")
BlockInfo = message_class("BlockInfo")
Block = message_class("Block")
Blocks = message_class("Blocks")
BlockMetadata = message_class("BlockMetadata")
OutPoint = message_class("OutPoint")
SpentBy = message_class("SpentBy")
TxInput = message_class("TxInput")
TxOutput = message_class("TxOutput")
Tx = message_class("Tx")
TxHistoryPage = message_class("TxHistoryPage")
RawTx = message_class("RawTx")
ScriptUtxo = message_class("ScriptUtxo")
ScriptUtxos = message_class("ScriptUtxos")
BroadcastTxRequest = message_class("BroadcastTxRequest")
BroadcastTxResponse = message_class("BroadcastTxResponse")
BroadcastTxsRequest = message_class("BroadcastTxsRequest")
BroadcastTxsResponse = message_class("BroadcastTxsResponse")
Error = message_class("Error")
