"""Hex conversions between wire bytes and human-readable strings.

Hashes (txids, block hashes) travel in internal byte order and are shown
byte-reversed ("big-endian" hex), the way block explorers print them.
Scripts and raw transactions are hex-encoded as-is.
"""

from typing import Union


def to_hex(data: bytes) -> str:
    """Hex-encode bytes in natural order."""
    return bytes(data).hex()


def from_hex(hex_str: str) -> bytes:
    """Decode a hex string in natural order.

    Raises:
        ValueError: If the string is not valid hex
    """
    return bytes.fromhex(hex_str)


def to_hex_rev(data: bytes) -> str:
    """Hex-encode a hash in human-readable (byte-reversed) order."""
    return bytes(data)[::-1].hex()


def from_hex_rev(hex_str: str) -> bytes:
    """Decode a human-readable hash hex string back to wire order.

    Raises:
        ValueError: If the string is not valid hex
    """
    return bytes.fromhex(hex_str)[::-1]


def parse_int64(value: Union[int, str]) -> int:
    """Convert a 64-bit wire value to int.

    Accepts the decimal-string form used by JSON renderings of the schema as
    well as native integers. No clamping or rounding is applied.
    """
    if isinstance(value, str):
        return int(value, 10)
    return int(value)


def raw_tx_bytes(raw_tx: Union[bytes, bytearray, str]) -> bytes:
    """Normalize a raw transaction given as bytes or as a hex string.

    The form is decided by type only: ``str`` is always parsed as hex.
    """
    if isinstance(raw_tx, str):
        return from_hex(raw_tx)
    return bytes(raw_tx)
