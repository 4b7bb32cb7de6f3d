"""
Keystore orchestrator: the only entry point collaborators need.

  encrypt(password, address, private_key_hex) -> KeystoreDocument
  decrypt(password, document)                 -> Credentials

Encryption: salt -> scrypt -> iv -> AES-128-CTR(dk[0:16]) -> keccak MAC.
Decryption: validate -> field lengths -> KDF(document params) -> MAC check
-> AES-128-CTR.

Key derivation is deliberately slow (scrypt is memory-hard); run these calls
on a worker thread, never on a latency-sensitive loop.  Nothing here retries:
a wrong password is a terminal ``InvalidPasswordError`` for that call.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from keystore_core import cipher
from keystore_core.document import (
    KEYSTORE_VERSION,
    CipherParams,
    CryptoSection,
    KeystoreDocument,
    suggested_filename,
    validate,
)
from keystore_core.errors import EncodingError, InvalidPasswordError, MissingWalletDataError
from keystore_core.hexcodec import (
    from_hex,
    pad_big_integer_bytes,
    parse_hex_integer,
    random_bytes,
    strip_hex_prefix,
    to_hex,
)
from keystore_core.kdf import KDF_SCRYPT, ScryptParams, derive
from keystore_core.mac import MAC_SIZE, compute_mac, macs_equal

logger = logging.getLogger("keystore_core.keystore")

PRIVATE_KEY_SIZE = 32


@dataclass(frozen=True)
class GenerationPolicy:
    """scrypt cost parameters used when *creating* a document.

    Decryption never consults a policy; it honours whatever the document
    stores.
    """
    n: int = 1 << 12
    r: int = 8
    p: int = 6
    dklen: int = 32
    salt_size: int = 32


DEFAULT_POLICY = GenerationPolicy()
# single lane, for slow devices
LIGHT_POLICY = GenerationPolicy(n=1 << 12, r=8, p=1)


@dataclass(frozen=True)
class Credentials:
    address: str
    private_key: str  # hex, no prefix

    def __repr__(self) -> str:
        # never print the key
        return f"Credentials({self.address})"


class WalletDataProvider(Protocol):
    """Whatever owns the plaintext key (another process, a bridge, a vault)."""

    def get_private_key(self) -> str | None: ...

    def get_address(self) -> str | None: ...


def _encode_password(password: str | bytes) -> bytes:
    if isinstance(password, bytes):
        return password
    return password.encode("utf-8")


# ===================================================================
#  Encrypt
# ===================================================================

def encrypt(
    password: str | bytes,
    address: str,
    private_key_hex: str,
    policy: GenerationPolicy = DEFAULT_POLICY,
) -> KeystoreDocument:
    """Seal *private_key_hex* under *password* into a new document."""
    if not private_key_hex:
        raise MissingWalletDataError("No private key supplied")
    if not address:
        raise MissingWalletDataError("No address supplied")

    # fails before the expensive KDF if the key is malformed or >= 2**256
    key_bytes = pad_big_integer_bytes(parse_hex_integer(private_key_hex), PRIVATE_KEY_SIZE)

    params = ScryptParams(
        n=policy.n,
        r=policy.r,
        p=policy.p,
        dklen=policy.dklen,
        salt=to_hex(random_bytes(policy.salt_size)),
    )
    derived_key = derive(_encode_password(password), params)
    iv = random_bytes(cipher.IV_SIZE)
    ciphertext = cipher.encrypt(derived_key[: cipher.KEY_SIZE], iv, key_bytes)
    mac = compute_mac(derived_key, ciphertext)

    doc = KeystoreDocument(
        version=KEYSTORE_VERSION,
        id=str(uuid.uuid4()),
        address=strip_hex_prefix(address),
        crypto=CryptoSection(
            cipher=cipher.CIPHER_NAME,
            cipherparams=CipherParams(iv=to_hex(iv)),
            ciphertext=to_hex(ciphertext),
            kdf=KDF_SCRYPT,
            kdfparams=params,
            mac=to_hex(mac),
        ),
    )
    logger.info(
        f"Keystore created (scrypt n={policy.n} r={policy.r} p={policy.p})",
        extra={"address": doc.address, "keystore_id": doc.id, "kdf": KDF_SCRYPT},
    )
    return doc


def encrypt_with_filename(
    password: str | bytes,
    address: str,
    private_key_hex: str,
    policy: GenerationPolicy = DEFAULT_POLICY,
    now: datetime | None = None,
) -> tuple[KeystoreDocument, str]:
    """Same as ``encrypt`` plus the conventional ``UTC--...--<address>.json`` name."""
    doc = encrypt(password, address, private_key_hex, policy)
    return doc, suggested_filename(doc.address, now)


def encrypt_to_json(
    password: str | bytes,
    address: str,
    private_key_hex: str,
    policy: GenerationPolicy = DEFAULT_POLICY,
) -> str:
    return encrypt(password, address, private_key_hex, policy).to_json()


def encrypt_from_provider(
    provider: WalletDataProvider,
    password: str | bytes,
    policy: GenerationPolicy = DEFAULT_POLICY,
) -> KeystoreDocument:
    """
    Fetch key material from *provider* and seal it.

    Connecting to / waiting on the provider is the caller's business; an empty
    answer is fatal here and is not retried.
    """
    private_key = provider.get_private_key()
    address = provider.get_address()
    if not private_key or not address:
        raise MissingWalletDataError("No wallet data found in provider")
    return encrypt(password, address, private_key, policy)


# ===================================================================
#  Decrypt
# ===================================================================

def _decode_field(name: str, text: str, size: int) -> bytes:
    raw = from_hex(text)
    if len(raw) != size:
        raise EncodingError(f"Keystore {name} must be {size} bytes, got {len(raw)}")
    return raw


def decrypt(password: str | bytes, doc: KeystoreDocument) -> Credentials:
    """Recover the private key; ``InvalidPasswordError`` on MAC mismatch.

    A mac, iv or ciphertext of the wrong size is an ``EncodingError`` raised
    before any key derivation.
    """
    validate(doc)

    crypto = doc.crypto
    expected_mac = _decode_field("mac", crypto.mac, MAC_SIZE)
    iv = _decode_field("iv", crypto.cipherparams.iv, cipher.IV_SIZE)
    ciphertext = _decode_field("ciphertext", crypto.ciphertext, PRIVATE_KEY_SIZE)

    derived_key = derive(_encode_password(password), crypto.kdfparams)
    if not macs_equal(compute_mac(derived_key, ciphertext), expected_mac):
        logger.debug("MAC mismatch", extra={"keystore_id": doc.id, "address": doc.address})
        raise InvalidPasswordError()

    private_key = cipher.decrypt(derived_key[: cipher.KEY_SIZE], iv, ciphertext)
    return Credentials(address=doc.address, private_key=to_hex(private_key))


def decrypt_json(password: str | bytes, text: str | bytes) -> Credentials:
    return decrypt(password, KeystoreDocument.from_json(text))
