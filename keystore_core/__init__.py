"""
Wallet keystore core: password-protected private key documents.

Key features:
- Keystore v3-style JSON documents (AES-128-CTR, scrypt / PBKDF2, Keccak-256 MAC)
- Constant-time MAC check before any plaintext is produced
- Fail-closed master password verifier for application unlock
- TOML / environment configuration and structured logging
"""

from keystore_core.document import KeystoreDocument, validate
from keystore_core.errors import (
    CipherError,
    EncodingError,
    InvalidPasswordError,
    KeystoreError,
    MissingWalletDataError,
    ParseError,
    UnsupportedCipherError,
    UnsupportedKdfError,
    UnsupportedVersionError,
)
from keystore_core.keystore import (
    DEFAULT_POLICY,
    Credentials,
    GenerationPolicy,
    decrypt,
    encrypt,
)

__version__ = "1.0.0"
__all__ = [
    "CipherError",
    "Credentials",
    "DEFAULT_POLICY",
    "EncodingError",
    "GenerationPolicy",
    "InvalidPasswordError",
    "KeystoreDocument",
    "KeystoreError",
    "MissingWalletDataError",
    "ParseError",
    "UnsupportedCipherError",
    "UnsupportedKdfError",
    "UnsupportedVersionError",
    "decrypt",
    "encrypt",
    "validate",
]
