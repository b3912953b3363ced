"""Typed async client for redundant Chronik indexer endpoints."""

__version__ = "0.1.0"

# Client
from chronik_client.client import ChronikClient, ScriptEndpoint, ScriptType

# Failover
from chronik_client.failover import FailoverProxy

# Configuration
from chronik_client.config import Config, load_config

# Errors
from chronik_client.errors import (
    AllEndpointsFailedError,
    ChronikError,
    ConfigError,
    DecodeError,
    ServerError,
    TransportError,
)

# Domain types
from chronik_client.models import (
    Block,
    BlockchainInfo,
    BlockInfo,
    BlockMetadata,
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

__all__ = [
    # Version
    "__version__",
    # Client
    "ChronikClient",
    "ScriptEndpoint",
    "ScriptType",
    "FailoverProxy",
    # Config
    "Config",
    "load_config",
    # Errors
    "ChronikError",
    "ConfigError",
    "TransportError",
    "AllEndpointsFailedError",
    "DecodeError",
    "ServerError",
    # Domain types
    "Block",
    "BlockchainInfo",
    "BlockInfo",
    "BlockMetadata",
    "ChronikInfo",
    "OutPoint",
    "RawTx",
    "ScriptUtxos",
    "Tx",
    "TxHistoryPage",
    "TxInput",
    "TxOutput",
    "Utxo",
]
