"""
AES-128-CTR, the only cipher a keystore document may name.

The 16-byte IV is the full initial counter block (incremented big-endian),
which is how the keystore v3 layout uses it.  CTR is a stream mode so
``len(output) == len(input)`` and encrypt/decrypt are the same operation.
"""

from __future__ import annotations

from Crypto.Cipher import AES

from keystore_core.errors import CipherError

CIPHER_NAME = "aes-128-ctr"
KEY_SIZE = 16
IV_SIZE = 16


def _ctr(key: bytes, iv: bytes):
    if len(key) != KEY_SIZE:
        raise CipherError(f"AES-128 key must be {KEY_SIZE} bytes, got {len(key)}")
    if len(iv) != IV_SIZE:
        raise CipherError(f"CTR iv must be {IV_SIZE} bytes, got {len(iv)}")
    try:
        return AES.new(bytes(key), AES.MODE_CTR, nonce=b"", initial_value=bytes(iv))
    except (ValueError, TypeError) as exc:
        raise CipherError(f"Error performing cipher operation: {exc}") from exc


def encrypt(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    """Encrypt *plaintext* with AES-128-CTR."""
    cipher = _ctr(key, iv)
    try:
        return cipher.encrypt(bytes(plaintext))
    except (ValueError, TypeError) as exc:
        raise CipherError(f"Error performing cipher operation: {exc}") from exc


def decrypt(key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    """Decrypt *ciphertext* with AES-128-CTR."""
    cipher = _ctr(key, iv)
    try:
        return cipher.decrypt(bytes(ciphertext))
    except (ValueError, TypeError) as exc:
        raise CipherError(f"Error performing cipher operation: {exc}") from exc
