"""
Keystore MAC: ``keccak256(derived_key[16:32] || ciphertext)``.

This is the original Keccak-256 (Ethereum's "sha3"), not FIPS 202 SHA3-256;
the two differ only in padding and produce different digests.
"""

from __future__ import annotations

import hmac

from Crypto.Hash import keccak

from keystore_core.errors import EncodingError

MAC_SIZE = 32


def keccak256(data: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=bytes(data)).digest()


def compute_mac(derived_key: bytes, ciphertext: bytes) -> bytes:
    if len(derived_key) < 32:
        raise EncodingError(f"Derived key too short for MAC: {len(derived_key)} bytes")
    return keccak256(bytes(derived_key[16:32]) + bytes(ciphertext))


def macs_equal(expected: bytes, actual: bytes) -> bool:
    """Constant-time comparison."""
    return hmac.compare_digest(bytes(expected), bytes(actual))
