"""
Hex / byte conversion helpers used by every keystore field.

All hex produced here is lowercase.  Parsing accepts an optional ``0x`` (or
``0X``) prefix and tolerates odd-length input by reading it as if a single
``0`` nibble had been prepended.
"""

from __future__ import annotations

import os
import string

from keystore_core.errors import EncodingError

HEX_PREFIX = "0x"
_HEX_DIGITS = frozenset(string.hexdigits)


def has_hex_prefix(text: str) -> bool:
    return len(text) > 1 and text[0] == "0" and text[1] in "xX"


def strip_hex_prefix(text: str) -> str:
    """Return *text* without its ``0x`` prefix (if any)."""
    return text[2:] if has_hex_prefix(text) else text


def to_hex(data: bytes, with_prefix: bool = False) -> str:
    out = bytes(data).hex()
    return HEX_PREFIX + out if with_prefix else out


def from_hex(text: str) -> bytes:
    """
    Decode a hex string into bytes.

    ``"0x"`` and ``""`` both decode to ``b""``; ``"abc"`` decodes exactly like
    ``"0abc"``.  Raises ``EncodingError`` on non-hex characters.
    """
    if not isinstance(text, str):
        raise EncodingError(f"Expected a hex string, got {type(text).__name__}")
    clean = strip_hex_prefix(text)
    if not clean:
        return b""
    if not _HEX_DIGITS.issuperset(clean):
        raise EncodingError("Invalid hex string: contains non-hexadecimal characters")
    if len(clean) % 2:
        clean = "0" + clean
    return bytes.fromhex(clean)


def parse_hex_integer(text: str) -> int:
    """Parse a base-16 integer (optional prefix); the private key entry point."""
    if not isinstance(text, str):
        raise EncodingError(f"Expected a hex string, got {type(text).__name__}")
    clean = strip_hex_prefix(text.strip())
    if not clean or not _HEX_DIGITS.issuperset(clean):
        raise EncodingError("Invalid hex integer")
    return int(clean, 16)


def pad_big_integer_bytes(value: int, length: int) -> bytes:
    """
    Encode a non-negative integer as exactly *length* big-endian bytes.

    Shorter magnitudes are zero-padded on the left.  A value that needs more
    than *length* bytes raises ``EncodingError``.
    """
    if value < 0:
        raise EncodingError("Cannot pad a negative integer")
    needed = (value.bit_length() + 7) // 8
    if needed > length:
        raise EncodingError(
            f"Input is too large to put in byte array of size {length}"
        )
    return value.to_bytes(length, "big")


def random_bytes(size: int) -> bytes:
    """Cryptographically secure random bytes."""
    return os.urandom(size)
