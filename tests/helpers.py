"""Fake Chronik endpoints and protobuf fixtures for tests."""

import httpx

from chronik_client import schema as proto


# Hash in wire order and its human-readable form
HASH_WIRE = bytes(range(32))
HASH_HEX = bytes(range(32))[::-1].hex()

PREV_HASH_WIRE = bytes([0xAA] * 31 + [0x01])
PREV_HASH_HEX = "01" + "aa" * 31

P2PKH_SCRIPT = bytes.fromhex("76a914" + "11" * 20 + "88ac")
P2PKH_PAYLOAD = "11" * 20


class FakeChronik:
    """Routes requests to per-endpoint behaviours and records every attempt.

    behaviours maps a base url (``https://a.example``) to a callable taking
    the httpx.Request and returning an httpx.Response (or raising).
    """

    def __init__(self, behaviours: dict):
        self.behaviours = behaviours
        self.calls: list[str] = []
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        base_url = f"{request.url.scheme}://{request.url.host}"
        self.calls.append(base_url)
        self.requests.append(request)
        return self.behaviours[base_url](request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def ok(message):
    """Answer with a serialized protobuf message (or raw bytes)."""
    body = message if isinstance(message, bytes) else message.SerializeToString()
    return lambda request: httpx.Response(200, content=body)


def status(code: int, msg: str = ""):
    """Answer with an HTTP error status and an Error body."""
    body = proto.Error(msg=msg).SerializeToString() if msg else b""
    return lambda request: httpx.Response(code, content=body)


def timeout(request):
    raise httpx.ReadTimeout("timed out", request=request)


def refused(request):
    raise httpx.ConnectError("connection refused", request=request)


def make_block_info(height: int = 800000) -> "proto.BlockInfo":
    return proto.BlockInfo(
        hash=HASH_WIRE,
        prev_hash=PREV_HASH_WIRE,
        height=height,
        n_bits=0x1D00FFFF,
        timestamp=1700000000,
        is_final=True,
        block_size=1234,
        num_txs=2,
        num_inputs=3,
        num_outputs=4,
        sum_input_sats=5_000_000,
        sum_coinbase_output_sats=625_000_000,
        sum_normal_output_sats=4_999_000,
        sum_burned_sats=0,
    )


def make_tx(confirmed: bool = True, spent: bool = False) -> "proto.Tx":
    tx = proto.Tx(
        txid=HASH_WIRE,
        version=2,
        lock_time=0,
        time_first_seen=1700000100,
        size=219,
        is_coinbase=False,
    )
    tx.inputs.add(
        prev_out=proto.OutPoint(txid=PREV_HASH_WIRE, out_idx=1),
        input_script=bytes.fromhex("4830450221"),
        output_script=P2PKH_SCRIPT,
        value=10_000,
        sequence_no=0xFFFFFFFF,
    )
    output = tx.outputs.add(value=9_000, output_script=P2PKH_SCRIPT)
    if spent:
        output.spent_by.CopyFrom(proto.SpentBy(txid=PREV_HASH_WIRE, input_idx=3))
    if confirmed:
        tx.block.CopyFrom(proto.BlockMetadata(
            height=800000,
            hash=HASH_WIRE,
            timestamp=1700000000,
            is_final=True,
        ))
    return tx


def make_utxo(out_idx: int = 0, value: int = 546, block_height: int = 800000) -> "proto.ScriptUtxo":
    return proto.ScriptUtxo(
        outpoint=proto.OutPoint(txid=HASH_WIRE, out_idx=out_idx),
        block_height=block_height,
        is_coinbase=False,
        value=value,
        is_final=False,
    )
