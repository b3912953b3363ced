"""Encoding of Chronik requests and decoding of Chronik responses.

Converts between protobuf wire messages and the dataclasses in
:mod:`chronik_client.models`:

- hashes are byte-reversed into human-readable hex
- scripts and raw txs are hex-encoded without reversal
- 64-bit values go through :func:`parse_int64`
- required sub-messages are checked; a missing one raises DecodeError
"""

from enum import Enum
from typing import Optional, Union

from google.protobuf import message as protobuf_message

from chronik_client import schema as proto
from chronik_client.encoding import parse_int64, to_hex, to_hex_rev
from chronik_client.errors import DecodeError
from chronik_client.models import (
    Block,
    BlockchainInfo,
    BlockInfo,
    BlockMetadata,
    BroadcastTxRequest,
    BroadcastTxsRequest,
    ChronikInfo,
    OutPoint,
    RawTx,
    ScriptUtxos,
    Tx,
    TxHistoryPage,
    TxInput,
    TxOutput,
    Utxo,
)


class MessageKind(Enum):
    """Response message kinds understood by :func:`decode`."""

    BLOCKCHAIN_INFO = "blockchain_info"
    CHRONIK_INFO = "chronik_info"
    BLOCK = "block"
    BLOCKS = "blocks"
    TX = "tx"
    RAW_TX = "raw_tx"
    TX_HISTORY_PAGE = "tx_history_page"
    SCRIPT_UTXOS = "script_utxos"
    BROADCAST_TX = "broadcast_tx"
    BROADCAST_TXS = "broadcast_txs"


# =============================================================================
# Requests
# =============================================================================


def encode_broadcast_tx(raw_tx: bytes, skip_token_checks: bool = False) -> bytes:
    """Encode a BroadcastTxRequest."""
    request = proto.BroadcastTxRequest(
        raw_tx=bytes(raw_tx),
        skip_token_checks=skip_token_checks,
    )
    return request.SerializeToString()


def encode_broadcast_txs(raw_txs: list[bytes], skip_token_checks: bool = False) -> bytes:
    """Encode a BroadcastTxsRequest."""
    request = proto.BroadcastTxsRequest(
        raw_txs=[bytes(raw_tx) for raw_tx in raw_txs],
        skip_token_checks=skip_token_checks,
    )
    return request.SerializeToString()


def encode(request: Union[BroadcastTxRequest, BroadcastTxsRequest]) -> bytes:
    """Encode a request dataclass into its wire message.

    Raises:
        TypeError: If the request type has no wire encoding
    """
    if isinstance(request, BroadcastTxRequest):
        return encode_broadcast_tx(request.raw_tx, request.skip_token_checks)
    if isinstance(request, BroadcastTxsRequest):
        return encode_broadcast_txs(request.raw_txs, request.skip_token_checks)
    raise TypeError(f"Cannot encode request of type {type(request).__name__}")


# =============================================================================
# Responses
# =============================================================================


def _parse(message_cls, data: bytes):
    """Parse wire bytes into a protobuf message, raising DecodeError on failure."""
    message = message_cls()
    try:
        message.ParseFromString(bytes(data))
    except protobuf_message.DecodeError as e:
        raise DecodeError(f"Invalid {message_cls.DESCRIPTOR.name} message: {e}") from e
    return message


def _require(message, field_name: str, what: str) -> None:
    if not message.HasField(field_name):
        raise DecodeError(f"{what} has no {field_name}")


def convert_blockchain_info(msg) -> BlockchainInfo:
    return BlockchainInfo(
        tip_hash=to_hex_rev(msg.tip_hash),
        tip_height=msg.tip_height,
    )


def convert_chronik_info(msg) -> ChronikInfo:
    _require(msg, "version", "ChronikInfo")
    return ChronikInfo(version=msg.version)


def convert_block_info(msg) -> BlockInfo:
    return BlockInfo(
        hash=to_hex_rev(msg.hash),
        prev_hash=to_hex_rev(msg.prev_hash),
        height=msg.height,
        n_bits=msg.n_bits,
        timestamp=parse_int64(msg.timestamp),
        is_final=msg.is_final,
        block_size=parse_int64(msg.block_size),
        num_txs=parse_int64(msg.num_txs),
        num_inputs=parse_int64(msg.num_inputs),
        num_outputs=parse_int64(msg.num_outputs),
        sum_input_sats=parse_int64(msg.sum_input_sats),
        sum_coinbase_output_sats=parse_int64(msg.sum_coinbase_output_sats),
        sum_normal_output_sats=parse_int64(msg.sum_normal_output_sats),
        sum_burned_sats=parse_int64(msg.sum_burned_sats),
    )


def convert_block(msg) -> Block:
    _require(msg, "block_info", "Block")
    return Block(block_info=convert_block_info(msg.block_info))


def convert_block_metadata(msg) -> BlockMetadata:
    return BlockMetadata(
        height=msg.height,
        hash=to_hex_rev(msg.hash),
        timestamp=parse_int64(msg.timestamp),
        is_final=msg.is_final,
    )


def convert_tx_input(msg) -> TxInput:
    _require(msg, "prev_out", "TxInput")
    return TxInput(
        prev_out=OutPoint(
            txid=to_hex_rev(msg.prev_out.txid),
            out_idx=msg.prev_out.out_idx,
        ),
        input_script=to_hex(msg.input_script),
        # empty means the server did not supply the spent output's script
        output_script=to_hex(msg.output_script) if msg.output_script else None,
        value=parse_int64(msg.value),
        sequence_no=msg.sequence_no,
    )


def convert_tx_output(msg) -> TxOutput:
    spent_by: Optional[OutPoint] = None
    if msg.HasField("spent_by"):
        spent_by = OutPoint(
            txid=to_hex_rev(msg.spent_by.txid),
            out_idx=msg.spent_by.input_idx,
        )
    return TxOutput(
        value=parse_int64(msg.value),
        output_script=to_hex(msg.output_script),
        spent_by=spent_by,
    )


def convert_tx(msg) -> Tx:
    return Tx(
        txid=to_hex_rev(msg.txid),
        version=msg.version,
        inputs=[convert_tx_input(tx_input) for tx_input in msg.inputs],
        outputs=[convert_tx_output(tx_output) for tx_output in msg.outputs],
        lock_time=msg.lock_time,
        block=convert_block_metadata(msg.block) if msg.HasField("block") else None,
        time_first_seen=parse_int64(msg.time_first_seen),
        size=msg.size,
        is_coinbase=msg.is_coinbase,
    )


def convert_tx_history_page(msg) -> TxHistoryPage:
    return TxHistoryPage(
        txs=[convert_tx(tx) for tx in msg.txs],
        num_pages=msg.num_pages,
        num_txs=msg.num_txs,
    )


def convert_utxo(msg) -> Utxo:
    _require(msg, "outpoint", "ScriptUtxo")
    return Utxo(
        outpoint=OutPoint(
            txid=to_hex_rev(msg.outpoint.txid),
            out_idx=msg.outpoint.out_idx,
        ),
        block_height=msg.block_height,
        is_coinbase=msg.is_coinbase,
        value=parse_int64(msg.value),
        is_final=msg.is_final,
    )


def convert_script_utxos(msg) -> ScriptUtxos:
    return ScriptUtxos(
        output_script=to_hex(msg.script),
        utxos=[convert_utxo(utxo) for utxo in msg.utxos],
    )


def decode_blockchain_info(data: bytes) -> BlockchainInfo:
    return convert_blockchain_info(_parse(proto.BlockchainInfo, data))


def decode_chronik_info(data: bytes) -> ChronikInfo:
    return convert_chronik_info(_parse(proto.ChronikInfo, data))


def decode_block(data: bytes) -> Block:
    return convert_block(_parse(proto.Block, data))


def decode_blocks(data: bytes) -> list[BlockInfo]:
    return [convert_block_info(block) for block in _parse(proto.Blocks, data).blocks]


def decode_tx(data: bytes) -> Tx:
    return convert_tx(_parse(proto.Tx, data))


def decode_raw_tx(data: bytes) -> RawTx:
    return RawTx(raw_tx=to_hex(_parse(proto.RawTx, data).raw_tx))


def decode_tx_history_page(data: bytes) -> TxHistoryPage:
    return convert_tx_history_page(_parse(proto.TxHistoryPage, data))


def decode_script_utxos(data: bytes) -> ScriptUtxos:
    """Decode the UTXOs of one concrete output script."""
    return convert_script_utxos(_parse(proto.ScriptUtxos, data))


def decode_broadcast_tx(data: bytes) -> str:
    """Decode a BroadcastTxResponse into the txid."""
    return to_hex_rev(_parse(proto.BroadcastTxResponse, data).txid)


def decode_broadcast_txs(data: bytes) -> list[str]:
    """Decode a BroadcastTxsResponse into the txids."""
    return [to_hex_rev(txid) for txid in _parse(proto.BroadcastTxsResponse, data).txids]


def decode_error(data: bytes) -> Optional[str]:
    """Decode the message of an Error response body.

    Returns:
        The server message, or None if the body is not an Error message
    """
    if not data:
        return None
    try:
        msg = _parse(proto.Error, data)
    except DecodeError:
        return None
    return msg.msg or None


_DECODERS = {
    MessageKind.BLOCKCHAIN_INFO: decode_blockchain_info,
    MessageKind.CHRONIK_INFO: decode_chronik_info,
    MessageKind.BLOCK: decode_block,
    MessageKind.BLOCKS: decode_blocks,
    MessageKind.TX: decode_tx,
    MessageKind.RAW_TX: decode_raw_tx,
    MessageKind.TX_HISTORY_PAGE: decode_tx_history_page,
    MessageKind.SCRIPT_UTXOS: decode_script_utxos,
    MessageKind.BROADCAST_TX: decode_broadcast_tx,
    MessageKind.BROADCAST_TXS: decode_broadcast_txs,
}


def decode(kind: MessageKind, data: bytes):
    """Decode a response body of the given kind into its domain value.

    Args:
        kind: Which response message the bytes hold
        data: Raw response body

    Returns:
        The domain value for that kind

    Raises:
        DecodeError: If the bytes are malformed or a required field is missing
    """
    return _DECODERS[MessageKind(kind)](data)
