"""Hex codec for block hashes.

Hashes are stored as raw bytes and rendered as lowercase hex with a
"0x" prefix. The prefix belongs to the output path only: decode_hash()
takes plain hex and rejects "0x" like any other non-hex input.
Decoding is strict: bytes.fromhex() alone would accept embedded
whitespace, so input is checked against an explicit pattern first.
"""

from __future__ import annotations

import re

from crystal_transfer.contracts.errors import DecodeError

HEX_PREFIX = "0x"

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")


def encode_hash(raw: bytes) -> str:
    """Render raw hash bytes as "0x" + lowercase hex."""
    return HEX_PREFIX + raw.hex()


def decode_hash(value: str) -> bytes:
    """Decode a plain hex hash (no prefix) to raw bytes.

    Raises:
        DecodeError: On odd length or any non-hex character, "0x" included
    """
    if _HEX_DIGITS.fullmatch(value) is None:
        raise DecodeError(value, "contains non-hex characters")
    if len(value) % 2:
        raise DecodeError(value, f"odd number of hex digits ({len(value)})")
    return bytes.fromhex(value)


def decode_encoded_hash(value: str) -> bytes:
    """Inverse of encode_hash(): the "0x" prefix is required, then stripped.

    Raises:
        DecodeError: If the prefix is missing or the digits are malformed
    """
    if not value.startswith(HEX_PREFIX):
        raise DecodeError(value, f"missing {HEX_PREFIX} prefix")
    return decode_hash(value[len(HEX_PREFIX) :])
