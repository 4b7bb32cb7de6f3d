"""
Exception taxonomy for the keystore core.

Every error is terminal for the call that raised it; nothing in this package
retries.  A wrong password surfaces *only* as ``InvalidPasswordError``.
"""

from __future__ import annotations


class KeystoreError(Exception):
    """Base class for all keystore failures."""


class UnsupportedVersionError(KeystoreError):
    def __init__(self, version: object):
        super().__init__(f"Keystore version is not supported: {version!r}")
        self.version = version


class UnsupportedCipherError(KeystoreError):
    def __init__(self, cipher: object):
        super().__init__(f"Keystore cipher is not supported: {cipher!r}")
        self.cipher = cipher


class UnsupportedKdfError(KeystoreError):
    """Unknown KDF tag (or PBKDF2 PRF tag); ``tag`` holds the offending string."""

    def __init__(self, tag: object):
        super().__init__(f"KDF type is not supported: {tag!r}")
        self.tag = tag


class InvalidPasswordError(KeystoreError):
    """MAC mismatch: wrong password or a tampered ciphertext/mac."""

    def __init__(self, message: str = "Invalid password provided"):
        super().__init__(message)


class EncodingError(KeystoreError, ValueError):
    """Malformed hex, wrong byte length or big-integer overflow."""


class CipherError(KeystoreError):
    """The underlying AES primitive failed."""


class ParseError(KeystoreError, ValueError):
    """A keystore document (or record) could not be read from its wire form."""


class MissingWalletDataError(KeystoreError, ValueError):
    """The wallet data provider returned no private key or address."""


# ── password policy ─────────────────────────────────────────────────

class PasswordPolicyError(KeystoreError, ValueError):
    """A new password was rejected before any hashing was done."""


class PasswordTooShortError(PasswordPolicyError):
    def __init__(self, minimum: int):
        super().__init__(f"Password must be at least {minimum} characters")
        self.minimum = minimum


class PasswordMismatchError(PasswordPolicyError):
    def __init__(self):
        super().__init__("Password and confirmation do not match")
