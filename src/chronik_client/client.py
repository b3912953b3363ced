"""Typed async client for the Chronik indexer."""

from enum import Enum
from typing import Optional, Sequence, Union

import httpx

from chronik_client import codec
from chronik_client.config import DEFAULT_TIMEOUT, Config
from chronik_client.encoding import raw_tx_bytes
from chronik_client.failover import FailoverProxy
from chronik_client.models import (
    Block,
    BlockchainInfo,
    BlockInfo,
    ChronikInfo,
    RawTx,
    ScriptUtxos,
    Tx,
    TxHistoryPage,
)

RawTxInput = Union[bytes, bytearray, str]

# Server enforces the maximum page size; it is not checked here.
DEFAULT_PAGE_SIZE = 25


class ScriptType(Enum):
    """Script type queried by :meth:`ChronikClient.script`.

    - OTHER: any other script; payload is the raw script hex
    - P2PK: ``<pk> OP_CHECKSIG``; payload is the 33 or 65 byte pubkey
    - P2PKH: ``OP_DUP OP_HASH160 <pkh> OP_EQUALVERIFY OP_CHECKSIG``;
      payload is the 20 byte pubkey hash
    - P2SH: ``OP_HASH160 <sh> OP_EQUAL``; payload is the 20 byte script hash
    """
    OTHER = "other"
    P2PK = "p2pk"
    P2PKH = "p2pkh"
    P2SH = "p2sh"


class ChronikClient:
    """Client for a redundant set of Chronik endpoints.

    Plain object: no connection is made until a request is issued. Each url
    must have a scheme and no trailing slash, e.g.
    ``["https://chronik.e.cash", "https://chronik-native1.fabien.cash"]``.
    Later urls are used when earlier ones are down.

    Raises:
        ConfigError: If the url list is empty or malformed
    """

    def __init__(
        self,
        urls: Sequence[str],
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._proxy_interface = FailoverProxy(urls, timeout=timeout, transport=transport)

    @classmethod
    def from_config(
        cls,
        config: Config,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ChronikClient":
        """Create a client from loaded configuration."""
        return cls(config.urls, timeout=config.timeout, transport=transport)

    def proxy_interface(self) -> FailoverProxy:
        """The underlying failover proxy."""
        return self._proxy_interface

    async def close(self):
        """Close HTTP client."""
        await self._proxy_interface.close()

    async def __aenter__(self) -> "ChronikClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def broadcast_tx(self, raw_tx: RawTxInput, skip_token_checks: bool = False) -> str:
        """Broadcast a raw transaction, return its txid.

        Unless `skip_token_checks` is set, the server refuses txs that burn
        tokens and a ServerError is raised.

        Failed attempts are retried on the next endpoint. An endpoint that
        timed out may still have relayed the tx, so the tx can reach the
        network more than once; the txid is the same either way.

        Args:
            raw_tx: Serialized tx as bytes or as a hex string
            skip_token_checks: Skip the server's token burn checks
        """
        body = codec.encode_broadcast_tx(raw_tx_bytes(raw_tx), skip_token_checks)
        data = await self._proxy_interface.post("/broadcast-tx", body)
        return codec.decode_broadcast_tx(data)

    async def broadcast_txs(
        self,
        raw_txs: Sequence[RawTxInput],
        skip_token_checks: bool = False,
    ) -> list[str]:
        """Broadcast several raw transactions, only if all of them are valid.

        Same delivery caveat as :meth:`broadcast_tx`.
        """
        body = codec.encode_broadcast_txs(
            [raw_tx_bytes(raw_tx) for raw_tx in raw_txs],
            skip_token_checks,
        )
        data = await self._proxy_interface.post("/broadcast-txs", body)
        return codec.decode_broadcast_txs(data)

    async def blockchain_info(self) -> BlockchainInfo:
        """Fetch current tip hash and height."""
        data = await self._proxy_interface.get("/blockchain-info")
        return codec.decode_blockchain_info(data)

    async def chronik_info(self) -> ChronikInfo:
        """Fetch info about the running Chronik server."""
        data = await self._proxy_interface.get("/chronik-info")
        return codec.decode_chronik_info(data)

    async def block(self, hash_or_height: Union[str, int]) -> Block:
        """Fetch a block by hash or height."""
        data = await self._proxy_interface.get(f"/block/{hash_or_height}")
        return codec.decode_block(data)

    async def block_txs(
        self,
        hash_or_height: Union[str, int],
        page: int = 0,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> TxHistoryPage:
        """Fetch one page of the txs of a block."""
        data = await self._proxy_interface.get(
            f"/block-txs/{hash_or_height}?page={page}&page_size={page_size}"
        )
        return codec.decode_tx_history_page(data)

    async def blocks(self, start_height: int, end_height: int) -> list[BlockInfo]:
        """Fetch block info for an inclusive range of heights.

        The range is passed through as-is; the server rejects invalid ones.
        """
        data = await self._proxy_interface.get(f"/blocks/{start_height}/{end_height}")
        return codec.decode_blocks(data)

    async def tx(self, txid: str) -> Tx:
        """Fetch tx details."""
        data = await self._proxy_interface.get(f"/tx/{txid}")
        return codec.decode_tx(data)

    async def raw_tx(self, txid: str) -> RawTx:
        """Fetch the serialized tx as hex."""
        data = await self._proxy_interface.get(f"/raw-tx/{txid}")
        return codec.decode_raw_tx(data)

    def script(self, script_type: Union[ScriptType, str], payload: str) -> "ScriptEndpoint":
        """Create an endpoint for fetching history and UTXOs of a script.

        Raises:
            ValueError: If `script_type` is not a known script type
        """
        return ScriptEndpoint(self._proxy_interface, ScriptType(script_type), payload)


class ScriptEndpoint:
    """History and UTXOs of one (script type, payload) pair."""

    def __init__(self, proxy_interface: FailoverProxy, script_type: ScriptType, payload: str):
        self._proxy_interface = proxy_interface
        self.script_type = script_type
        self.payload = payload

    @property
    def _base_path(self) -> str:
        return f"/script/{self.script_type.value}/{self.payload}"

    async def history(self, page: int = 0, page_size: int = DEFAULT_PAGE_SIZE) -> TxHistoryPage:
        """Fetch one page of the script's tx history.

        Anti-chronological: ``txs[0]`` is the most recently first-seen tx.
        Txs the indexer never saw in its mempool are ordered by block.
        Do not rely on strict timestamp ordering beyond that.

        Args:
            page: Page index
            page_size: Txs per page
        """
        data = await self._proxy_interface.get(
            f"{self._base_path}/history?page={page}&page_size={page_size}"
        )
        return codec.decode_tx_history_page(data)

    async def utxos(self) -> ScriptUtxos:
        """Fetch the current UTXO set of this script.

        The result carries the concrete output script the UTXOs are locked
        by, since a script type and payload can stand for more than one
        output script.
        """
        data = await self._proxy_interface.get(f"{self._base_path}/utxos")
        return codec.decode_script_utxos(data)
