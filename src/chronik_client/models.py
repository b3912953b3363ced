"""Domain types returned by the Chronik client.

All hashes are human-readable (byte-reversed) hex, all scripts are hex in
natural byte order and all amounts are in satoshis.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class BlockchainInfo:
    """Current tip of the chain."""
    tip_hash: str
    tip_height: int


@dataclass
class ChronikInfo:
    """Info about the connected Chronik server."""
    version: str


@dataclass
class BlockInfo:
    """Header data and aggregate statistics of a block."""
    hash: str
    prev_hash: str
    height: int  # genesis is 0
    n_bits: int  # compact target
    timestamp: int  # set by the miner, not precise
    is_final: bool  # avalanche finalized
    block_size: int  # bytes, including header
    num_txs: int
    num_inputs: int  # including coinbase
    num_outputs: int  # including coinbase
    sum_input_sats: int
    sum_coinbase_output_sats: int  # block reward
    sum_normal_output_sats: int  # non-coinbase outputs
    sum_burned_sats: int  # burned via OP_RETURN


@dataclass
class Block:
    """A block as returned by the block endpoint."""
    block_info: BlockInfo


@dataclass
class OutPoint:
    """Reference to a tx output, or to a spending input for `spent_by`."""
    txid: str
    out_idx: int


@dataclass
class BlockMetadata:
    """Block a transaction was mined in."""
    height: int
    hash: str
    timestamp: int  # useful when time_first_seen is unknown
    is_final: bool = False


@dataclass
class TxInput:
    """Input of a tx, spends an output of a previous tx."""
    prev_out: OutPoint
    input_script: str  # scriptSig
    output_script: Optional[str]  # scriptPubKey of the spent output, if known
    value: int
    sequence_no: int


@dataclass
class TxOutput:
    """Output of a tx, creates a new UTXO."""
    value: int
    output_script: str  # scriptPubKey
    spent_by: Optional[OutPoint] = None  # txid + input index of the spender


@dataclass
class Tx:
    """A transaction on the blockchain or in the mempool."""
    txid: str
    version: int
    inputs: list[TxInput]
    outputs: list[TxOutput]
    lock_time: int
    block: Optional[BlockMetadata]  # None while unconfirmed
    time_first_seen: int  # 0 if unknown, make sure to check
    size: int
    is_coinbase: bool

    @property
    def is_confirmed(self) -> bool:
        """Whether the tx has been mined."""
        return self.block is not None


@dataclass
class TxHistoryPage:
    """One page of tx history."""
    txs: list[Tx]
    num_pages: int
    num_txs: int


@dataclass
class RawTx:
    """Serialized transaction as hex."""
    raw_tx: str


@dataclass
class Utxo:
    """An unspent output of a script."""
    outpoint: OutPoint
    block_height: int  # -1 if in the mempool
    is_coinbase: bool  # must be buried 100 blocks before spending
    value: int
    is_final: bool

    @property
    def is_mempool(self) -> bool:
        """Whether the UTXO is unconfirmed."""
        return self.block_height == -1


@dataclass
class ScriptUtxos:
    """UTXOs of one concrete output script."""
    output_script: str
    utxos: list[Utxo] = field(default_factory=list)


@dataclass
class BroadcastTxRequest:
    """Request to broadcast a single raw transaction."""
    raw_tx: bytes
    skip_token_checks: bool = False


@dataclass
class BroadcastTxsRequest:
    """Request to broadcast several raw transactions at once."""
    raw_txs: list[bytes]
    skip_token_checks: bool = False
