"""Tests for the typed Chronik client."""

import pytest

from chronik_client import schema as proto
from chronik_client.client import ChronikClient, ScriptEndpoint, ScriptType
from chronik_client.config import Config
from chronik_client.errors import ConfigError, DecodeError, ServerError
from chronik_client.models import BlockchainInfo

from helpers import (
    HASH_HEX,
    HASH_WIRE,
    P2PKH_PAYLOAD,
    P2PKH_SCRIPT,
    FakeChronik,
    make_block_info,
    make_tx,
    make_utxo,
    ok,
    status,
    timeout,
)

A = "https://a.example"
B = "https://b.example"
C = "https://c.example"


def client_for(fake: FakeChronik) -> ChronikClient:
    return ChronikClient(list(fake.behaviours), transport=fake.transport)


def paths(fake: FakeChronik) -> list[str]:
    return [request.url.raw_path.decode() for request in fake.requests]


class TestClientConstruction:

    def test_empty_urls(self):
        with pytest.raises(ConfigError):
            ChronikClient([])

    def test_from_config(self):
        config = Config(urls=[A, B], timeout=3.0)
        client = ChronikClient.from_config(config)
        assert client.proxy_interface().endpoints == (A, B)

    @pytest.mark.asyncio
    async def test_async_context_manager_closes(self):
        async with ChronikClient([A]) as client:
            proxy = client.proxy_interface()
        assert proxy._client.is_closed


class TestBlockchainInfo:

    @pytest.mark.asyncio
    async def test_failover_scenario(self):
        """A times out, B answers 5xx, C answers; the next call starts at C."""
        info = proto.BlockchainInfo(tip_hash=HASH_WIRE, tip_height=800000)
        fake = FakeChronik({A: timeout, B: status(500, "internal"), C: ok(info)})
        client = client_for(fake)

        result = await client.blockchain_info()

        assert result == BlockchainInfo(tip_hash=HASH_HEX, tip_height=800000)
        assert fake.calls == [A, B, C]

        fake.calls.clear()
        await client.blockchain_info()
        assert fake.calls == [C]

    @pytest.mark.asyncio
    async def test_chronik_info(self):
        fake = FakeChronik({A: ok(proto.ChronikInfo(version="0.30.1"))})
        client = client_for(fake)

        assert (await client.chronik_info()).version == "0.30.1"
        assert paths(fake) == ["/chronik-info"]

    @pytest.mark.asyncio
    async def test_chronik_info_without_version(self):
        fake = FakeChronik({A: ok(proto.ChronikInfo())})
        with pytest.raises(DecodeError):
            await client_for(fake).chronik_info()


class TestBlocks:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("hash_or_height,expected", [
        (800000, "/block/800000"),
        (HASH_HEX, f"/block/{HASH_HEX}"),
    ])
    async def test_block_path(self, hash_or_height, expected):
        fake = FakeChronik({A: ok(proto.Block(block_info=make_block_info()))})
        block = await client_for(fake).block(hash_or_height)

        assert block.block_info.hash == HASH_HEX
        assert paths(fake) == [expected]

    @pytest.mark.asyncio
    async def test_block_without_info_not_retried(self):
        """A DecodeError is surfaced without trying another endpoint."""
        fake = FakeChronik({A: ok(proto.Block()), B: ok(proto.Block(block_info=make_block_info()))})

        with pytest.raises(DecodeError):
            await client_for(fake).block(1)
        assert fake.calls == [A]

    @pytest.mark.asyncio
    async def test_block_txs_default_paging(self):
        """No paging arguments means page 0 of 25."""
        page = proto.TxHistoryPage(txs=[make_tx()], num_pages=1, num_txs=1)
        fake = FakeChronik({A: ok(page)})
        client = client_for(fake)

        default = await client.block_txs(800000)
        explicit = await client.block_txs(800000, page=0, page_size=25)

        assert default == explicit
        assert paths(fake) == ["/block-txs/800000?page=0&page_size=25"] * 2

    @pytest.mark.asyncio
    async def test_blocks_range_passed_through(self):
        """An inverted range is forwarded for the server to judge."""
        fake = FakeChronik({A: status(400, "Invalid block range")})

        with pytest.raises(ServerError, match="Invalid block range"):
            await client_for(fake).blocks(10, 5)
        assert paths(fake) == ["/blocks/10/5"]

    @pytest.mark.asyncio
    async def test_blocks(self):
        msg = proto.Blocks(blocks=[make_block_info(5), make_block_info(6)])
        fake = FakeChronik({A: ok(msg)})

        blocks = await client_for(fake).blocks(5, 6)
        assert [block.height for block in blocks] == [5, 6]


class TestTransactions:

    @pytest.mark.asyncio
    async def test_tx(self):
        fake = FakeChronik({A: ok(make_tx())})
        tx = await client_for(fake).tx(HASH_HEX)

        assert tx.txid == HASH_HEX
        assert paths(fake) == [f"/tx/{HASH_HEX}"]

    @pytest.mark.asyncio
    async def test_raw_tx(self):
        fake = FakeChronik({A: ok(proto.RawTx(raw_tx=b"\x02\x00"))})
        raw_tx = await client_for(fake).raw_tx(HASH_HEX)

        assert raw_tx.raw_tx == "0200"
        assert paths(fake) == [f"/raw-tx/{HASH_HEX}"]


class TestBroadcast:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw_tx", ["0100ff", bytes([0x01, 0x00, 0xFF])])
    async def test_broadcast_hex_or_bytes(self, raw_tx):
        """Hex strings and bytes produce the same request."""
        fake = FakeChronik({A: ok(proto.BroadcastTxResponse(txid=HASH_WIRE))})

        txid = await client_for(fake).broadcast_tx(raw_tx)

        assert txid == HASH_HEX
        request = proto.BroadcastTxRequest()
        request.ParseFromString(fake.requests[0].content)
        assert request.raw_tx == bytes([0x01, 0x00, 0xFF])
        assert request.skip_token_checks is False
        assert paths(fake) == ["/broadcast-tx"]

    @pytest.mark.asyncio
    async def test_token_burn_rejected(self):
        """A definitive rejection is surfaced and no other endpoint is tried."""
        fake = FakeChronik({
            A: status(400, "Tx burns tokens"),
            B: ok(proto.BroadcastTxResponse(txid=HASH_WIRE)),
        })

        with pytest.raises(ServerError) as exc_info:
            await client_for(fake).broadcast_tx("0100", skip_token_checks=False)

        assert exc_info.value.message == "Tx burns tokens"
        assert fake.calls == [A]

    @pytest.mark.asyncio
    async def test_broadcast_txs(self):
        response = proto.BroadcastTxsResponse(txids=[HASH_WIRE, HASH_WIRE])
        fake = FakeChronik({A: ok(response)})

        txids = await client_for(fake).broadcast_txs(["01", b"\x02"], skip_token_checks=True)

        assert txids == [HASH_HEX, HASH_HEX]
        request = proto.BroadcastTxsRequest()
        request.ParseFromString(fake.requests[0].content)
        assert list(request.raw_txs) == [b"\x01", b"\x02"]
        assert request.skip_token_checks is True
        assert paths(fake) == ["/broadcast-txs"]

    @pytest.mark.asyncio
    async def test_broadcast_fails_over_on_timeout(self):
        """Broadcasts follow the same failover policy as reads."""
        fake = FakeChronik({A: timeout, B: ok(proto.BroadcastTxResponse(txid=HASH_WIRE))})

        assert await client_for(fake).broadcast_tx("01") == HASH_HEX
        assert fake.calls == [A, B]


class TestScriptEndpoint:

    def test_script_type_from_string(self):
        client = ChronikClient([A])
        endpoint = client.script("p2pkh", P2PKH_PAYLOAD)

        assert isinstance(endpoint, ScriptEndpoint)
        assert endpoint.script_type is ScriptType.P2PKH

    def test_unknown_script_type(self):
        with pytest.raises(ValueError):
            ChronikClient([A]).script("p2tr", P2PKH_PAYLOAD)

    @pytest.mark.asyncio
    async def test_history_default_paging(self):
        page = proto.TxHistoryPage(txs=[make_tx()], num_pages=2, num_txs=30)
        fake = FakeChronik({A: ok(page)})
        script = client_for(fake).script(ScriptType.P2PKH, P2PKH_PAYLOAD)

        default = await script.history()
        explicit = await script.history(0, 25)

        assert default == explicit
        assert default.num_pages == 2
        assert default.num_txs == 30
        expected = f"/script/p2pkh/{P2PKH_PAYLOAD}/history?page=0&page_size=25"
        assert paths(fake) == [expected, expected]

    @pytest.mark.asyncio
    async def test_history_page_size_not_clamped(self):
        """Out-of-range page sizes are the server's to reject."""
        fake = FakeChronik({A: status(400, "Requested page size 1000 is too big")})
        script = client_for(fake).script("p2sh", "22" * 20)

        with pytest.raises(ServerError):
            await script.history(page=1, page_size=1000)
        assert paths(fake) == [f"/script/p2sh/{'22' * 20}/history?page=1&page_size=1000"]

    @pytest.mark.asyncio
    async def test_utxos(self):
        """UTXOs come back with the concrete output script they belong to."""
        msg = proto.ScriptUtxos(
            script=P2PKH_SCRIPT,
            utxos=[make_utxo(0, 1000), make_utxo(1, 2000)],
        )
        fake = FakeChronik({A: ok(msg)})

        script_utxos = await client_for(fake).script("p2pkh", P2PKH_PAYLOAD).utxos()

        assert script_utxos.output_script == P2PKH_SCRIPT.hex()
        assert [utxo.value for utxo in script_utxos.utxos] == [1000, 2000]
        assert paths(fake) == [f"/script/p2pkh/{P2PKH_PAYLOAD}/utxos"]
