"""MCP server exposing Chronik indexer queries.

This server exposes tools for reading blockchain info, blocks, transactions
and script history/UTXOs from a redundant set of Chronik endpoints, and for
broadcasting signed transactions.
"""

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from mcp.server.fastmcp import FastMCP

from chronik_client.client import ChronikClient
from chronik_client.config import Config, load_config
from chronik_client.errors import ChronikError

logger = logging.getLogger(__name__)

# Searched in order by main()
CONFIG_PATHS = [
    Path("chronik-client.toml"),
    Path.home() / ".config" / "chronik-client" / "config.toml",
]

BROADCAST_DISABLED = (
    "Broadcasting is disabled. Set allow_broadcast = true in the [safety] "
    "section of the configuration to enable it."
)

# Shown with every broadcast result
BROADCAST_NOTE = (
    "A failed attempt on one endpoint may still have relayed the transaction "
    "before another endpoint accepted it."
)


def _error_result(error: Exception) -> dict:
    return {"error": str(error), "error_type": type(error).__name__}


def create_server(
    config: Optional[Config] = None,
    client: Optional[ChronikClient] = None,
) -> FastMCP:
    """Create and configure the MCP server with all tools.

    Args:
        config: Optional configuration. If not provided, uses defaults.
        client: Optional pre-built client, created lazily from config if omitted.

    Returns:
        Configured FastMCP server instance.
    """
    if config is None:
        config = Config()

    mcp = FastMCP("chronik-client")

    # Store config on server for access by tools
    mcp._config = config
    mcp._chronik_client = client

    def get_client() -> ChronikClient:
        """Get or create the Chronik client."""
        if mcp._chronik_client is None:
            mcp._chronik_client = ChronikClient.from_config(config)
        return mcp._chronik_client

    # =========================================================================
    # Chain
    # =========================================================================

    @mcp.tool()
    async def get_blockchain_info() -> dict:
        """Get the current chain tip.

        Returns:
            Dictionary with 'tip_hash' and 'tip_height'.
        """
        try:
            info = await get_client().blockchain_info()
        except ChronikError as e:
            return _error_result(e)
        return asdict(info)

    @mcp.tool()
    async def get_chronik_info() -> dict:
        """Get the version of the Chronik server answering requests.

        Returns:
            Dictionary with 'version'.
        """
        try:
            info = await get_client().chronik_info()
        except ChronikError as e:
            return _error_result(e)
        return asdict(info)

    @mcp.tool()
    async def get_block(hash_or_height: str) -> dict:
        """Get block info by hash or height.

        Args:
            hash_or_height: Block hash (hex) or block height

        Returns:
            Dictionary with 'block_info'.
        """
        try:
            block = await get_client().block(hash_or_height)
        except ChronikError as e:
            return _error_result(e)
        return asdict(block)

    @mcp.tool()
    async def get_block_txs(hash_or_height: str, page: int = 0, page_size: int = 25) -> dict:
        """Get one page of the transactions of a block.

        Args:
            hash_or_height: Block hash (hex) or block height
            page: Page index (default: 0)
            page_size: Transactions per page (default: 25)

        Returns:
            Dictionary with 'txs', 'num_pages' and 'num_txs'.
        """
        try:
            history = await get_client().block_txs(hash_or_height, page, page_size)
        except ChronikError as e:
            return _error_result(e)
        return asdict(history)

    @mcp.tool()
    async def get_blocks(start_height: int, end_height: int) -> dict:
        """Get block info for an inclusive range of heights.

        Args:
            start_height: First block height
            end_height: Last block height

        Returns:
            Dictionary with 'count' and 'blocks'.
        """
        try:
            blocks = await get_client().blocks(start_height, end_height)
        except ChronikError as e:
            return _error_result(e)
        return {
            "count": len(blocks),
            "blocks": [asdict(block) for block in blocks],
        }

    # =========================================================================
    # Transactions
    # =========================================================================

    @mcp.tool()
    async def get_tx(txid: str) -> dict:
        """Fetch transaction details.

        Args:
            txid: Transaction ID (hash)

        Returns:
            Dictionary with transaction details. 'block' is None while the
            transaction is unconfirmed; 'time_first_seen' is 0 if unknown.
        """
        try:
            tx = await get_client().tx(txid)
        except ChronikError as e:
            return _error_result(e)
        result = asdict(tx)
        result["is_confirmed"] = tx.is_confirmed
        return result

    @mcp.tool()
    async def get_raw_tx(txid: str) -> dict:
        """Fetch the serialized transaction.

        Args:
            txid: Transaction ID (hash)

        Returns:
            Dictionary with 'raw_tx' as hex.
        """
        try:
            raw_tx = await get_client().raw_tx(txid)
        except ChronikError as e:
            return _error_result(e)
        return asdict(raw_tx)

    @mcp.tool()
    async def broadcast_tx(raw_tx_hex: str, skip_token_checks: Optional[bool] = None) -> dict:
        """Send a signed transaction to the network.

        Args:
            raw_tx_hex: Signed transaction as hex string
            skip_token_checks: Skip the server's token burn checks
                (default: from configuration)

        Returns:
            Dictionary with 'txid', or 'error' if the server rejected it.
        """
        if not config.allow_broadcast:
            return {"error": BROADCAST_DISABLED, "broadcast": False}
        if skip_token_checks is None:
            skip_token_checks = config.skip_token_checks_default

        try:
            txid = await get_client().broadcast_tx(raw_tx_hex, skip_token_checks)
        except (ChronikError, ValueError) as e:
            return {**_error_result(e), "broadcast": False}
        return {"txid": txid, "broadcast": True, "note": BROADCAST_NOTE}

    @mcp.tool()
    async def broadcast_txs(
        raw_txs_hex: list[str],
        skip_token_checks: Optional[bool] = None,
    ) -> dict:
        """Send several signed transactions, only if all of them are valid.

        Args:
            raw_txs_hex: Signed transactions as hex strings
            skip_token_checks: Skip the server's token burn checks
                (default: from configuration)

        Returns:
            Dictionary with 'txids', or 'error' if the server rejected them.
        """
        if not config.allow_broadcast:
            return {"error": BROADCAST_DISABLED, "broadcast": False}
        if skip_token_checks is None:
            skip_token_checks = config.skip_token_checks_default

        try:
            txids = await get_client().broadcast_txs(raw_txs_hex, skip_token_checks)
        except (ChronikError, ValueError) as e:
            return {**_error_result(e), "broadcast": False}
        return {"txids": txids, "broadcast": True, "note": BROADCAST_NOTE}

    # =========================================================================
    # Scripts
    # =========================================================================

    @mcp.tool()
    async def get_script_history(
        script_type: str,
        payload: str,
        page: int = 0,
        page_size: int = 25,
    ) -> dict:
        """Get one page of the tx history of a script, most recent first.

        Args:
            script_type: One of 'other', 'p2pk', 'p2pkh', 'p2sh'
            payload: Hex payload (script, pubkey or hash depending on type)
            page: Page index (default: 0)
            page_size: Transactions per page (default: 25)

        Returns:
            Dictionary with 'txs', 'num_pages' and 'num_txs'.
        """
        try:
            history = await get_client().script(script_type, payload).history(page, page_size)
        except (ChronikError, ValueError) as e:
            return _error_result(e)
        return asdict(history)

    @mcp.tool()
    async def get_script_utxos(script_type: str, payload: str) -> dict:
        """Get the UTXOs of a script.

        Args:
            script_type: One of 'other', 'p2pk', 'p2pkh', 'p2sh'
            payload: Hex payload (script, pubkey or hash depending on type)

        Returns:
            Dictionary with 'output_script', 'utxos' and 'count'.
        """
        try:
            script_utxos = await get_client().script(script_type, payload).utxos()
        except (ChronikError, ValueError) as e:
            return _error_result(e)
        result = asdict(script_utxos)
        result["count"] = len(script_utxos.utxos)
        return result

    return mcp


def main():
    """Entry point for the MCP server."""
    logging.basicConfig(level=logging.INFO)

    # Try to load config from standard locations
    config = None
    for path in CONFIG_PATHS:
        if path.exists():
            logger.info("Loading configuration from %s", path)
            config = load_config(path)
            break

    if config is None:
        config = Config()

    server = create_server(config)
    server.run()


if __name__ == "__main__":
    main()
